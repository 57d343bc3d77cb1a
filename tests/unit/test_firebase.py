from __future__ import annotations

import json
from typing import Any, Dict, List

import pytest

from acure_cli.proxy.firebase import FirebaseClient, FirebaseError


class _MockResponse:
    def __init__(self, status_code: int = 200, payload: Any = None) -> None:
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.text = json.dumps(self._payload)

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        return self._payload


class FakeHTTP:
    def __init__(self, responses: List[_MockResponse]) -> None:
        self.responses = responses
        self.calls: List[Dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> _MockResponse:
        self.calls.append({"method": "POST", "url": url, **kwargs})
        return self.responses.pop(0)

    def request(self, method: str, url: str, **kwargs: Any) -> _MockResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        return self.responses.pop(0)


def _client(*responses: _MockResponse):
    http = FakeHTTP(list(responses))
    return FirebaseClient(api_key="key", project_id="proj", timeout_seconds=3, session=http), http


def test_sign_in_posts_to_identity_toolkit() -> None:
    client, http = _client(_MockResponse(payload={"localId": "u1", "idToken": "tok"}))
    assert client.sign_in("a@b.co", "secret1")["idToken"] == "tok"
    call = http.calls[0]
    assert call["url"].endswith("/accounts:signInWithPassword")
    assert call["params"] == {"key": "key"}
    assert call["json"]["returnSecureToken"] is True
    assert call["timeout"] == 3


def test_identity_error_code_is_extracted() -> None:
    client, _ = _client(_MockResponse(400, {"error": {"message": "EMAIL_EXISTS"}}))
    with pytest.raises(FirebaseError) as excinfo:
        client.sign_up("a@b.co", "secret1")
    assert excinfo.value.code == "EMAIL_EXISTS"
    assert excinfo.value.status == 400


def test_lookup_returns_first_user_or_raises() -> None:
    client, _ = _client(_MockResponse(payload={"users": [{"localId": "u1"}]}), _MockResponse(payload={"users": []}))
    assert client.lookup("tok") == {"localId": "u1"}
    with pytest.raises(FirebaseError, match="USER_NOT_FOUND"):
        client.lookup("tok")


def test_list_scans_uses_user_collection_and_bearer() -> None:
    client, http = _client(_MockResponse(payload={"documents": [{"name": "a"}, "junk"]}))
    assert client.list_scans("u1", "tok") == [{"name": "a"}]
    call = http.calls[0]
    assert call["url"].endswith("/projects/proj/databases/(default)/documents/users/u1/scans")
    assert call["headers"]["Authorization"] == "Bearer tok"


def test_list_scans_missing_collection_is_empty() -> None:
    client, _ = _client(_MockResponse(404, {"error": {"status": "NOT_FOUND"}}))
    assert client.list_scans("u1", "tok") == []


def test_list_scans_failure_raises() -> None:
    client, _ = _client(_MockResponse(403, {"error": {"status": "PERMISSION_DENIED"}}))
    with pytest.raises(FirebaseError, match="Failed to fetch scans"):
        client.list_scans("u1", "tok")


def test_create_scan_passes_document_id() -> None:
    client, http = _client(_MockResponse(payload={"name": "doc"}))
    client.create_scan("u1", "tok", "sid", {"scanId": {"stringValue": "sid"}})
    call = http.calls[0]
    assert call["method"] == "POST"
    assert call["params"] == {"documentId": "sid"}
    assert call["json"] == {"fields": {"scanId": {"stringValue": "sid"}}}


def test_get_and_delete_scan_not_found() -> None:
    client, _ = _client(_MockResponse(404), _MockResponse(404), _MockResponse(200))
    assert client.get_scan("u1", "tok", "missing") is None
    assert client.delete_scan("u1", "tok", "missing") is False
    assert client.delete_scan("u1", "tok", "present") is True
