"""Durable key/value storage with a capacity ceiling."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from acure_cli.core.constants import DEFAULT_STORAGE_CAPACITY

logger = logging.getLogger(__name__)


class StorageQuotaExceeded(RuntimeError):
    """Raised when a write would exceed the storage capacity."""


class StorageUnavailable(RuntimeError):
    """Raised when the backing file cannot be written at all."""


class LocalStorage:
    """String key/value store persisted as a single JSON document.

    Mirrors browser local storage: values are strings, and the total number of
    characters held across keys and values is capped at ``capacity``.
    """

    def __init__(self, path: Path, capacity: int = DEFAULT_STORAGE_CAPACITY) -> None:
        self.path = path
        self.capacity = capacity
        self._items: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: root is not an object", self.path)
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def _flush(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                prefix=".acure-storage-", suffix=".json", dir=str(self.path.parent)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._items, handle)
            os.replace(temp_name, self.path)
        except OSError as exc:
            raise StorageUnavailable(f"Failed to write storage file {self.path}: {exc}") from exc

    def used(self) -> int:
        """Number of characters currently held."""
        return sum(len(key) + len(value) for key, value in self._items.items())

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        current = self._items.get(key)
        freed = len(key) + len(current) if current is not None else 0
        needed = self.used() - freed + len(key) + len(value)
        if needed > self.capacity:
            raise StorageQuotaExceeded(
                f"Setting {key!r} needs {needed} characters; capacity is {self.capacity}"
            )
        self._items[key] = value
        self._flush()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._flush()

    def keys(self) -> List[str]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()
        self._flush()
