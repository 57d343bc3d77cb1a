"""Local scan result cache keyed by ``scan_<id>``."""

from __future__ import annotations

import json
import logging
import random
import string
import time
from typing import List, Optional

from acure_cli.core.constants import EVICTION_BATCH, MAX_CACHED_RECORD_CHARS, SCAN_KEY_PREFIX
from acure_cli.core.models import ScanRecord
from acure_cli.core.storage import LocalStorage, StorageQuotaExceeded

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_scan_id() -> str:
    """Time-ordered id: epoch milliseconds plus a 9-char base36 suffix."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{int(time.time() * 1000)}_{suffix}"


def scan_key(scan_id: str) -> str:
    return f"{SCAN_KEY_PREFIX}{scan_id}"


class ScanCache:
    """Durable cache of scan records backed by :class:`LocalStorage`."""

    def __init__(self, storage: LocalStorage, max_record_chars: int = MAX_CACHED_RECORD_CHARS) -> None:
        self.storage = storage
        self.max_record_chars = max_record_chars

    def _serialize(self, record: ScanRecord) -> str:
        payload = json.dumps(record.to_dict())
        if len(payload) > self.max_record_chars and record.image:
            logger.warning(
                "Scan %s is %d characters; dropping image from cached copy", record.id, len(payload)
            )
            payload = json.dumps(record.without_image().to_dict())
        return payload

    def _evict_oldest(self) -> List[str]:
        keys = sorted(key for key in self.storage.keys() if key.startswith(SCAN_KEY_PREFIX))
        evicted = keys[:EVICTION_BATCH]
        for key in evicted:
            logger.info("Evicting cached scan %s", key)
            self.storage.remove_item(key)
        return evicted

    def put(self, record: ScanRecord) -> ScanRecord:
        """Cache ``record`` and return it with its id assigned.

        On a quota failure the five oldest cached scans are evicted and the
        write is retried once; a second failure propagates.
        """
        if not record.id:
            record = record.with_id(generate_scan_id())

        key = scan_key(str(record.id))
        payload = self._serialize(record)
        try:
            self.storage.set_item(key, payload)
        except StorageQuotaExceeded:
            logger.warning("Storage full, clearing old scans before retrying %s", key)
            self._evict_oldest()
            self.storage.set_item(key, payload)
        return record

    def get(self, scan_id: str) -> Optional[ScanRecord]:
        raw = self.storage.get_item(scan_key(scan_id))
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Cached scan %s is corrupted", scan_id)
            return None
        if not isinstance(data, dict):
            return None
        record = ScanRecord.from_dict(data)
        return record if record.id else record.with_id(scan_id)

    def remove(self, scan_id: str) -> None:
        self.storage.remove_item(scan_key(scan_id))

    def ids(self) -> List[str]:
        return sorted(
            key[len(SCAN_KEY_PREFIX):]
            for key in self.storage.keys()
            if key.startswith(SCAN_KEY_PREFIX)
        )

    def records(self) -> List[ScanRecord]:
        """All cached records, newest id first."""
        found = []
        for scan_id in reversed(self.ids()):
            record = self.get(scan_id)
            if record is not None:
                found.append(record)
        return found
