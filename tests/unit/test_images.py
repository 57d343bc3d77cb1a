from __future__ import annotations

import base64
from pathlib import Path

import pytest

from acure_cli.core.images import (
    ImageError,
    compress_data_uri,
    compress_for_upload,
    decode_data_uri,
    image_to_data_uri,
    open_image,
)


def test_image_to_data_uri_uses_mime_from_suffix(image_file: Path) -> None:
    uri = image_to_data_uri(image_file)
    assert uri.startswith("data:image/png;base64,")
    assert open_image(uri).size == (40, 30)


def test_image_to_data_uri_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ImageError, match="Cannot read image"):
        image_to_data_uri(tmp_path / "nope.jpg")


def test_decode_data_uri() -> None:
    payload = base64.b64encode(b"hello").decode()
    assert decode_data_uri(f"data:text/plain;base64,{payload}") == ("text/plain", b"hello")
    with pytest.raises(ImageError):
        decode_data_uri("https://example.com/a.png")


def test_compress_data_uri_scales_to_max_width(make_image) -> None:
    uri = make_image(width=1200, height=800)
    compressed = compress_data_uri(uri, quality=0.6, max_width=600)

    assert compressed.startswith("data:image/jpeg;base64,")
    assert open_image(compressed).size == (600, 400)


def test_compress_data_uri_keeps_small_width(make_image) -> None:
    compressed = compress_data_uri(make_image(width=100, height=50), max_width=600)
    assert open_image(compressed).size == (100, 50)


def test_compress_for_upload_threshold(make_image) -> None:
    uri = make_image(width=200, height=200)
    assert compress_for_upload(uri, threshold=len(uri)) == uri
    assert compress_for_upload(uri, threshold=10).startswith("data:image/jpeg;base64,")
    assert compress_for_upload("", threshold=0) == ""


def test_compress_for_upload_keeps_original_on_failure() -> None:
    broken = "data:image/png;base64," + base64.b64encode(b"x" * 64).decode()
    assert compress_for_upload(broken, threshold=10) == broken
