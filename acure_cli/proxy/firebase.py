"""Firebase Authentication and Firestore over REST."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

IDENTITY_BASE = "https://identitytoolkit.googleapis.com/v1"
FIRESTORE_BASE = "https://firestore.googleapis.com/v1"


class FirebaseError(RuntimeError):
    """Raised for a failed Firebase REST call."""

    def __init__(self, status: int, code: str, message: Optional[str] = None) -> None:
        self.status = status
        self.code = code
        super().__init__(message or code)


def _error_code(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        return str(error.get("message") or error.get("status") or "")
    return str(error or payload)


class FirebaseClient:
    """Identity Toolkit and Firestore calls used by the edge proxy."""

    def __init__(
        self,
        api_key: str,
        project_id: str,
        timeout_seconds: float = 15,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.project_id = project_id
        self.timeout_seconds = timeout_seconds
        self.http = session or requests.Session()

    def _identity(self, action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        response = self.http.post(
            f"{IDENTITY_BASE}/accounts:{action}",
            params={"key": self.api_key},
            json=payload,
            timeout=self.timeout_seconds,
        )
        if not response.ok:
            code = _error_code(response)
            logger.info("identitytoolkit %s failed: %s", action, code)
            raise FirebaseError(response.status_code, code)
        return response.json()

    def sign_up(self, email: str, password: str) -> Dict[str, Any]:
        return self._identity("signUp", {"email": email, "password": password, "returnSecureToken": True})

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        return self._identity(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )

    def lookup(self, id_token: str) -> Dict[str, Any]:
        """Return the user record owning ``id_token``."""
        data = self._identity("lookup", {"idToken": id_token})
        users = data.get("users") or []
        if not users:
            raise FirebaseError(401, "USER_NOT_FOUND")
        return users[0]

    def _scans_url(self, user_id: str) -> str:
        return (
            f"{FIRESTORE_BASE}/projects/{self.project_id}/databases/(default)/documents/"
            f"users/{user_id}/scans"
        )

    def _firestore(
        self,
        method: str,
        url: str,
        token: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        return self.http.request(
            method,
            url,
            headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
            params=params,
            json=json_data,
            timeout=self.timeout_seconds,
        )

    def list_scans(self, user_id: str, token: str) -> List[Dict[str, Any]]:
        """Scan documents of ``user_id``; a missing collection yields ``[]``."""
        response = self._firestore("GET", self._scans_url(user_id), token)
        if response.status_code == 404:
            return []
        if not response.ok:
            raise FirebaseError(response.status_code, _error_code(response), "Failed to fetch scans from Firestore")
        documents = response.json().get("documents") or []
        return [doc for doc in documents if isinstance(doc, dict)]

    def create_scan(self, user_id: str, token: str, scan_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        response = self._firestore(
            "POST",
            self._scans_url(user_id),
            token,
            params={"documentId": scan_id},
            json_data={"fields": fields},
        )
        if not response.ok:
            raise FirebaseError(response.status_code, response.text, "Failed to save scan")
        return response.json()

    def get_scan(self, user_id: str, token: str, scan_id: str) -> Optional[Dict[str, Any]]:
        response = self._firestore("GET", f"{self._scans_url(user_id)}/{scan_id}", token)
        if response.status_code == 404:
            return None
        if not response.ok:
            raise FirebaseError(response.status_code, _error_code(response), "Failed to fetch scan")
        return response.json()

    def delete_scan(self, user_id: str, token: str, scan_id: str) -> bool:
        response = self._firestore("DELETE", f"{self._scans_url(user_id)}/{scan_id}", token)
        if response.status_code == 404:
            return False
        if not response.ok:
            raise FirebaseError(response.status_code, _error_code(response), "Failed to delete scan")
        return True
