"""Runtime state container for CLI context."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console

from acure_cli.core.api import AcureAPI
from acure_cli.core.cache import ScanCache
from acure_cli.core.config import resolve_api_base, resolve_storage_file
from acure_cli.core.constants import DEFAULT_STORAGE_CAPACITY
from acure_cli.core.session import StorageSessionStore
from acure_cli.core.storage import LocalStorage


@dataclass
class CLIState:
    """CLI runtime options, loaded configuration and lazily built collaborators."""

    json_output: bool
    plain_output: bool
    verbose: bool
    quiet: bool
    config_path: Path
    config: Dict[str, Any]
    console: Console
    _storage: Optional[LocalStorage] = field(default=None, repr=False)

    @property
    def storage(self) -> LocalStorage:
        if self._storage is None:
            capacity = int(self.config.get("storage", {}).get("capacity_chars", DEFAULT_STORAGE_CAPACITY))
            self._storage = LocalStorage(resolve_storage_file(self.config), capacity=capacity)
        return self._storage

    @property
    def session_store(self) -> StorageSessionStore:
        return StorageSessionStore(self.storage)

    @property
    def cache(self) -> ScanCache:
        return ScanCache(self.storage)

    def api(self, token: Optional[str] = None) -> AcureAPI:
        store = self.session_store
        if token is None:
            session = store.get()
            token = session.token if session else None
        return AcureAPI(
            token=token,
            base_url=resolve_api_base(self.config),
            timeout_seconds=float(self.config.get("api", {}).get("timeout_seconds", 15)),
            session_store=store,
        )
