"""Authentication helpers for Acure Scan CLI."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

from acure_cli.core.api import AcureAPI, APIError
from acure_cli.core.models import Session
from acure_cli.core.session import SessionStore

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
MIN_NAME_LENGTH = 3


class ValidationError(ValueError):
    """Raised for bad user input; the message is meant for the user."""


def validate_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


def validate_login(email: str, password: str) -> None:
    if not validate_email(email):
        raise ValidationError("Please enter a valid email address")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError("Password must be at least 6 characters")


def validate_registration(
    name: Optional[str],
    email: str,
    password: str,
    confirm_password: Optional[str] = None,
) -> str:
    """Validate registration input and return the effective display name."""
    email = (email or "").strip()
    effective_name = (name or "").strip() or email.split("@")[0]

    if len(effective_name) < MIN_NAME_LENGTH:
        raise ValidationError("Please enter a valid name (min 3 characters)")
    if confirm_password is not None and password != confirm_password:
        raise ValidationError("Passwords do not match")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError("Password must be at least 6 characters")
    if not validate_email(email):
        raise ValidationError("Please enter a valid email address")
    return effective_name


class AcureAuth:
    """Login/logout workflow tying the API client to a session store."""

    def __init__(self, api: AcureAPI, store: SessionStore) -> None:
        self.api = api
        self.store = store
        if api.session_store is None:
            api.session_store = store

    def login(self, email: str, password: str) -> Session:
        email = (email or "").strip()
        validate_login(email, password)
        data = self.api.login(email, password)
        if not data.get("token"):
            raise APIError("Login succeeded but no token was returned")

        session = Session.from_user_data(data)
        self.store.set(session)
        self.api.token = session.token
        logger.info("Logged in as %s", session.email)
        return session

    def register(
        self,
        name: Optional[str],
        email: str,
        password: str,
        confirm_password: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create an account. The new account is not signed in."""
        email = (email or "").strip()
        effective_name = validate_registration(name, email, password, confirm_password)
        return self.api.register(effective_name, email, password)

    def logout(self) -> bool:
        """Clear the local session, telling the backend first when a token exists."""
        session = self.store.get()
        if session is None:
            self.store.clear()
            return False

        self.api.token = session.token
        try:
            self.api.logout()
        except APIError as exc:
            logger.warning("Backend logout failed: %s", exc)
        finally:
            self.store.clear()
            self.api.token = None
        return True

    def initialize(self) -> Optional[Session]:
        """Verify the stored session with the backend.

        Returns the session when the token is still valid; on any failure the
        stored session is cleared and None is returned.
        """
        session = self.store.get()
        if session is None:
            return None

        self.api.token = session.token
        try:
            self.api.verify()
        except APIError as exc:
            logger.info("Stored session rejected: %s", exc)
            self.store.clear()
            self.api.token = None
            return None
        return session
