"""Image encoding helpers for scan payloads."""

from __future__ import annotations

import base64
import io
import logging
import mimetypes
from pathlib import Path
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from acure_cli.core.constants import COMPRESS_THRESHOLD_CHARS

logger = logging.getLogger(__name__)


class ImageError(ValueError):
    """Raised when an image cannot be read or decoded."""


def image_to_data_uri(path: Path) -> str:
    """Read an image file into a ``data:`` URI."""
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ImageError(f"Cannot read image {path}: {exc}") from exc
    mime = mimetypes.guess_type(path.name)[0] or "image/jpeg"
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"


def decode_data_uri(uri: str) -> Tuple[str, bytes]:
    """Return ``(mime, bytes)`` for a base64 data URI."""
    if not uri.startswith("data:") or ";base64," not in uri:
        raise ImageError("Not a base64 data URI")
    header, encoded = uri.split(",", 1)
    mime = header[len("data:"):].split(";", 1)[0] or "application/octet-stream"
    try:
        return mime, base64.b64decode(encoded, validate=False)
    except ValueError as exc:
        raise ImageError(f"Invalid base64 payload: {exc}") from exc


def open_image(uri: str) -> Image.Image:
    _, raw = decode_data_uri(uri)
    try:
        image = Image.open(io.BytesIO(raw))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageError(f"Failed to load image: {exc}") from exc
    return image


def compress_data_uri(uri: str, quality: float = 0.6, max_width: int = 600) -> str:
    """Re-encode an image data URI as JPEG, scaled down to ``max_width``."""
    image = open_image(uri).convert("RGB")
    width, height = image.size
    if width > max_width:
        height = int(height * max_width / width)
        width = max_width
        image = image.resize((width, height))

    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=max(1, min(95, int(quality * 100))))
    return f"data:image/jpeg;base64,{base64.b64encode(buffer.getvalue()).decode('ascii')}"


def compress_for_upload(
    uri: str,
    threshold: int = COMPRESS_THRESHOLD_CHARS,
    quality: float = 0.6,
    max_width: int = 600,
) -> str:
    """Compress large images before upload; keep the original if that fails."""
    if not uri or len(uri) <= threshold:
        return uri
    try:
        compressed = compress_data_uri(uri, quality=quality, max_width=max_width)
    except ImageError as exc:
        logger.warning("Image compression failed, using original: %s", exc)
        return uri
    logger.debug("Image compressed from %d to %d characters", len(uri), len(compressed))
    return compressed
