"""Push cached scan results to the backend."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from acure_cli.core.api import AcureAPI
from acure_cli.core.cache import ScanCache
from acure_cli.core.constants import COMPRESS_THRESHOLD_CHARS
from acure_cli.core.images import compress_for_upload
from acure_cli.core.models import ScanRecord, Session

logger = logging.getLogger(__name__)


def upload_scan(
    api: AcureAPI,
    cache: ScanCache,
    session: Session,
    record: ScanRecord,
    scan_config: Optional[Dict[str, Any]] = None,
) -> ScanRecord:
    """Save ``record`` remotely and cache the copy under its server id.

    Large images are recompressed first; the returned record carries the
    server-assigned id and the image that was actually uploaded.
    """
    cfg = scan_config or {}
    image = compress_for_upload(
        record.image,
        threshold=int(cfg.get("compress_threshold", COMPRESS_THRESHOLD_CHARS)),
        quality=float(cfg.get("compress_quality", 0.6)),
        max_width=int(cfg.get("compress_max_width", 600)),
    )
    outgoing = replace(record, image=image, user_id=session.user_id)
    extra = {
        "createdAt": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "userEmail": session.email,
        "userName": session.name,
    }

    server_id = api.save_scan(session.user_id, outgoing, extra=extra)
    logger.info("Scan %s saved remotely as %s", record.id, server_id)
    return cache.put(outgoing.with_id(server_id))
