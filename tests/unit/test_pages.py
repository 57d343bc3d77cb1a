from __future__ import annotations

from typing import List, Optional

import pytest

from acure_cli.core.api import AcureAPI, AuthExpired, NotFound
from acure_cli.core.cache import ScanCache
from acure_cli.core.models import ScanRecord, Session
from acure_cli.core.pages import App, AppContext
from acure_cli.core.routes import Navigator
from acure_cli.core.session import MemorySessionStore


class FakeAPI(AcureAPI):
    def __init__(self, store: MemorySessionStore, remote: Optional[List[ScanRecord]] = None) -> None:
        super().__init__(token="tok", session_store=store)
        self.remote = remote or []
        self.expired = False

    def list_scans(self, user_id: str) -> List[ScanRecord]:
        if self.expired:
            self._expire_session()
            raise AuthExpired("Authentication expired. Please login again.")
        return list(self.remote)

    def get_scan(self, user_id: str, scan_id: str) -> ScanRecord:
        for record in self.remote:
            if record.id == scan_id:
                return record
        raise NotFound(f"Scan {scan_id} not found")


def _app(cache: ScanCache, session: Optional[Session] = None, remote=None, per_page: int = 9):
    store = MemorySessionStore(session)
    api = FakeAPI(store, remote)
    context = AppContext(
        session_store=store,
        cache=cache,
        navigator=Navigator(),
        api=api,
        config={"history": {"per_page": per_page}},
    )
    return App(context), api, store


def test_guest_is_redirected_to_login(cache: ScanCache) -> None:
    app, _, _ = _app(cache)
    payload = app.open("#/dashboard")
    assert payload["page"] == "login"
    assert payload["path"] == "/login"
    assert payload["title"] == "Login Page"
    assert app.context.navigator.location == "#/login"


def test_signed_in_user_is_redirected_to_dashboard(cache: ScanCache, session: Session, sample_record) -> None:
    cache.put(sample_record.with_id("1000_a"))
    app, _, _ = _app(cache, session)

    payload = app.open("#/login")

    assert payload["page"] == "dashboard"
    assert payload["status"] == "ok"
    assert payload["user"]["uid"] == "user-1"
    assert [scan["id"] for scan in payload["recentScans"]] == ["1000_a"]


def test_landing_for_guest(cache: ScanCache) -> None:
    payload = _app(cache)[0].open("#/")
    assert payload["page"] == "landing"


def test_unknown_path_renders_landing(cache: ScanCache, session: Session) -> None:
    payload = _app(cache, session)[0].open("#/does-not-exist")
    assert payload["page"] == "landing"
    assert payload["path"] == "/"


def test_result_page_reads_cache(cache: ScanCache, session: Session, sample_record) -> None:
    stored = cache.put(sample_record)
    payload = _app(cache, session)[0].open(f"#/result?scanId={stored.id}")
    assert payload["scan"]["id"] == stored.id
    assert payload["scan"]["dominantAcne"] == sample_record.dominant_label


@pytest.mark.parametrize(
    "location, message",
    [
        ("#/result", "No scan ID provided"),
        ("#/result?scanId=missing", "Scan result not found"),
        ("#/article-detail?slug=unknown", "not found"),
    ],
)
def test_page_errors(cache: ScanCache, session: Session, location: str, message: str) -> None:
    payload = _app(cache, session)[0].open(location)
    assert payload["page"] == "error"
    assert payload["status"] == "error"
    assert message in payload["message"]


def test_result_detail_fetches_remote(cache: ScanCache, session: Session, sample_record) -> None:
    remote = [sample_record.with_id("srv-1")]
    payload = _app(cache, session, remote)[0].open("#/result-detail?scanId=srv-1")
    assert payload["page"] == "result-detail"
    assert payload["scan"]["id"] == "srv-1"


def test_result_detail_not_found(cache: ScanCache, session: Session) -> None:
    payload = _app(cache, session)[0].open("#/result-detail?scanId=nope")
    assert payload["status"] == "error"


def test_history_merges_filters_and_pages(cache: ScanCache, session: Session, sample_record) -> None:
    cache.put(sample_record.with_id("local-1"))
    remote = [
        ScanRecord(dominant_label="Cyst (Kista)", confidence=0.9, timestamp="2026-03-05T00:00:00Z", id="srv-1"),
        ScanRecord(dominant_label="Cyst (Kista)", confidence=0.4, timestamp="2026-03-04T00:00:00Z", id="srv-2"),
    ]
    app, _, _ = _app(cache, session, remote, per_page=1)

    payload = app.open("#/history?filter=cyst&sort=oldest&page=2")

    assert payload["total"] == 2
    assert payload["totalPages"] == 2
    assert payload["pageNumber"] == 2
    assert [scan["id"] for scan in payload["scans"]] == ["srv-1"]


def test_history_bad_sort_is_error(cache: ScanCache, session: Session) -> None:
    payload = _app(cache, session)[0].open("#/history?sort=sideways")
    assert payload["status"] == "error"


def test_expired_session_redirects_to_login(cache: ScanCache, session: Session) -> None:
    app, api, store = _app(cache, session)
    api.expired = True

    payload = app.open("#/history")

    assert store.get() is None
    assert payload["page"] == "login"
    assert app.context.navigator.location == "#/login"


def test_article_pages(cache: ScanCache, session: Session) -> None:
    app = _app(cache, session)[0]
    listing = app.open("#/article")
    assert len(listing["articles"]) == 5
    detail = app.open("#/article-detail?slug=kistik")
    assert detail["article"]["slug"] == "kistik"


def test_listener_renders_keep_only_latest_payload(cache: ScanCache, session: Session) -> None:
    app = _app(cache, session)[0]
    navigator = app.context.navigator
    app.open("#/article")

    for location in ("#/", "#/article-detail?slug=kistik", "#/article"):
        navigator.navigate(location)
        navigator.flush()

    assert app.last_rendered is not None
    assert app.last_rendered["path"] == "/article"
    assert "articles" in app.last_rendered
