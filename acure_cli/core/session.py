"""Session persistence behind an injectable store interface."""

from __future__ import annotations

import json
import logging
from typing import Optional, Protocol

from acure_cli.core.constants import TOKEN_KEY, USER_DATA_KEY
from acure_cli.core.models import Session
from acure_cli.core.storage import LocalStorage, StorageQuotaExceeded, StorageUnavailable

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Holds at most one active session."""

    def get(self) -> Optional[Session]: ...

    def set(self, session: Session) -> None: ...

    def clear(self) -> None: ...


class MemorySessionStore:
    """In-process session store."""

    def __init__(self, session: Optional[Session] = None) -> None:
        self._session = session

    def get(self) -> Optional[Session]:
        return self._session

    def set(self, session: Session) -> None:
        self._session = session

    def clear(self) -> None:
        self._session = None


class StorageSessionStore:
    """Session stored under ``userToken``/``userData`` in :class:`LocalStorage`."""

    def __init__(self, storage: LocalStorage) -> None:
        self.storage = storage

    def token(self) -> Optional[str]:
        return self.storage.get_item(TOKEN_KEY) or None

    def get(self) -> Optional[Session]:
        token = self.token()
        raw = self.storage.get_item(USER_DATA_KEY)
        if not token or not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Discarding malformed %s entry", USER_DATA_KEY)
            return None
        if not isinstance(data, dict):
            return None
        return Session.from_user_data(data, token=token)

    def set(self, session: Session) -> None:
        """Store both keys; a failed second write removes the first."""
        self.storage.set_item(TOKEN_KEY, session.token)
        try:
            self.storage.set_item(USER_DATA_KEY, json.dumps(session.to_user_data()))
        except (StorageQuotaExceeded, StorageUnavailable):
            self.storage.remove_item(TOKEN_KEY)
            raise

    def clear(self) -> None:
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_DATA_KEY)
