"""CORS policy for the edge proxy."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

logger = logging.getLogger(__name__)

ALLOWED_SUFFIXES = (".netlify.app", ".github.io")

BASE_HEADERS = {
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, Accept, Origin, X-Requested-With",
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Expose-Headers": "Authorization",
}


def is_allowed_origin(origin: str, allowed_origins: Sequence[str]) -> bool:
    """Exact allow-list match, or a Netlify/GitHub Pages host suffix."""
    if not origin:
        return False
    return origin in allowed_origins or origin.endswith(ALLOWED_SUFFIXES)


def cors_headers(
    origin: Optional[str],
    allowed_origins: Sequence[str],
    strict: bool = False,
) -> Dict[str, str]:
    """Build response CORS headers for ``origin``.

    Unlisted origins receive the first allow-list entry as the allowed origin,
    which the browser then rejects for that caller. With ``strict`` the
    allow-origin header is omitted for them instead.
    """
    headers = dict(BASE_HEADERS)
    origin = origin or ""

    if is_allowed_origin(origin, allowed_origins):
        headers["Access-Control-Allow-Origin"] = origin
        return headers

    if strict or not allowed_origins:
        logger.info("Rejecting CORS origin %r", origin)
        return headers

    if origin:
        logger.warning("Unlisted CORS origin %r; answering with %s", origin, allowed_origins[0])
    headers["Access-Control-Allow-Origin"] = allowed_origins[0]
    return headers
