"""Acure Scan REST client for the edge API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from acure_cli.core.constants import API_BASE
from acure_cli.core.models import ScanRecord
from acure_cli.core.normalize import normalize_scan
from acure_cli.core.session import SessionStore

logger = logging.getLogger(__name__)


class APIError(RuntimeError):
    """Base class for edge API failures."""


class AuthExpired(APIError):
    """Raised on HTTP 401; the local session has been cleared."""


class NotFound(APIError):
    """Raised when a specific resource does not exist."""


class RemoteError(APIError):
    """Raised for any other non-2xx response."""

    def __init__(self, status: int, body: Any, message: Optional[str] = None) -> None:
        self.status = status
        self.body = body
        super().__init__(message or f"HTTP {status}: {_error_message(body)}")


class Timeout(APIError):
    """Raised when the backend does not answer within the client deadline."""


def _error_message(body: Any) -> str:
    if isinstance(body, dict):
        return str(body.get("error") or body.get("message") or body)
    return str(body)


class AcureAPI:
    """Thin wrapper around the Acure Scan edge API.

    Calls are single-shot: no retries happen here, every request carries a
    timeout, and an HTTP 401 on an authenticated call clears ``session_store``.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = API_BASE,
        timeout_seconds: float = 15,
        session_store: Optional[SessionStore] = None,
    ) -> None:
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session_store = session_store

    @property
    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _expire_session(self) -> None:
        self.token = None
        if self.session_store is not None:
            self.session_store.clear()

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        if authenticated and not self.token:
            raise AuthExpired("Authentication token not available")

        logger.debug("%s %s params=%s", method, url, params)
        try:
            response = requests.request(
                method=method,
                url=url,
                headers=self._headers if authenticated else {"Content-Type": "application/json"},
                params=params,
                json=json_data,
                timeout=self.timeout_seconds,
            )
        except requests.Timeout as exc:
            raise Timeout(f"{method} {path} timed out after {self.timeout_seconds}s") from exc
        except requests.RequestException as exc:
            raise APIError(f"API request failed for {method} {path}: {exc}") from exc

        if response.status_code == 401 and authenticated:
            logger.info("Received 401 from %s %s; clearing session", method, path)
            self._expire_session()
            raise AuthExpired("Authentication expired. Please login again.")
        return response

    @staticmethod
    def _payload(response: requests.Response) -> Any:
        if not response.text:
            return {}
        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _data(payload: Any) -> Any:
        return payload.get("data") if isinstance(payload, dict) else None

    def _checked(self, response: requests.Response) -> Any:
        payload = self._payload(response)
        if not 200 <= response.status_code < 300:
            raise RemoteError(response.status_code, payload)
        return payload

    # Auth endpoints

    def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        response = self._request(
            "POST",
            "/api/auth/register",
            json_data={"name": name, "email": email, "password": password},
            authenticated=False,
        )
        return self._data(self._checked(response)) or {}

    def login(self, email: str, password: str) -> Dict[str, Any]:
        response = self._request(
            "POST",
            "/api/auth/login",
            json_data={"email": email, "password": password},
            authenticated=False,
        )
        return self._data(self._checked(response)) or {}

    def verify(self) -> Dict[str, Any]:
        payload = self._checked(self._request("GET", "/api/auth/verify"))
        if isinstance(payload, dict) and payload.get("success") is False:
            raise RemoteError(200, payload, _error_message(payload))
        return self._data(payload) or {}

    def logout(self) -> Dict[str, Any]:
        return self._checked(self._request("POST", "/api/auth/logout"))

    # Scan endpoints

    def save_scan(self, user_id: str, record: ScanRecord, extra: Optional[Dict[str, Any]] = None) -> str:
        """Persist ``record`` remotely and return the server-assigned id."""
        body = record.to_dict()
        body.pop("id", None)
        body.pop("scanId", None)
        body.update(extra or {})
        body["userId"] = user_id
        payload = self._checked(self._request("POST", "/api/scans", json_data=body))
        data = self._data(payload) or {}
        scan_id = data.get("id") or data.get("scanId")
        if not scan_id:
            raise RemoteError(200, payload, "Server did not return a scan id")
        return str(scan_id)

    def list_scans(self, user_id: str) -> List[ScanRecord]:
        response = self._request("GET", "/api/scans", params={"userId": user_id})
        if response.status_code == 404:
            return []
        payload = self._checked(response)
        items = self._data(payload) or []
        return [
            normalize_scan(item, user_id=user_id, index=index)
            for index, item in enumerate(items)
            if isinstance(item, dict)
        ]

    def get_scan(self, user_id: str, scan_id: str) -> ScanRecord:
        response = self._request("GET", f"/api/scans/{scan_id}", params={"userId": user_id})
        if response.status_code == 404:
            raise NotFound(f"Scan {scan_id} not found")
        payload = self._checked(response)
        if not isinstance(payload, dict) or not payload.get("success"):
            raise RemoteError(response.status_code, payload, "Failed to fetch scan")
        return normalize_scan(self._data(payload) or {}, user_id=user_id)

    def delete_scan(self, user_id: str, scan_id: str) -> bool:
        response = self._request("DELETE", f"/api/scans/{scan_id}", params={"userId": user_id})
        if response.status_code == 404:
            raise NotFound(f"Scan {scan_id} not found")
        payload = self._checked(response)
        return bool(payload.get("success")) if isinstance(payload, dict) else False
