"""Page controllers and the hash-route application dispatcher."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Type

from acure_cli.core.api import AcureAPI, APIError, AuthExpired, NotFound
from acure_cli.core.cache import ScanCache
from acure_cli.core.classify import scan_summary
from acure_cli.core.constants import ARTICLES
from acure_cli.core.history import filter_and_sort, merge_history, paginate
from acure_cli.core.routes import LOGIN_PATH, Navigator, check_auth, resolve_route
from acure_cli.core.session import SessionStore
from acure_cli.core.storage import StorageQuotaExceeded, StorageUnavailable

logger = logging.getLogger(__name__)

Payload = Dict[str, Any]


class PageError(RuntimeError):
    """Raised by a page controller when it cannot render."""


@dataclass
class AppContext:
    """Collaborators shared by page controllers."""

    session_store: SessionStore
    cache: ScanCache
    navigator: Navigator
    api: Optional[AcureAPI] = None
    config: Dict[str, Any] = field(default_factory=dict)

    def user_id(self) -> Optional[str]:
        session = self.session_store.get()
        return session.user_id if session else None

    def has_token(self) -> bool:
        session = self.session_store.get()
        return bool(session and session.token)


class Page:
    """Base page controller."""

    name = "page"

    def __init__(self, context: AppContext) -> None:
        self.context = context

    def render(self, params: Dict[str, str]) -> Payload:
        return {"page": self.name}

    def _require_api(self) -> AcureAPI:
        if self.context.api is None:
            raise PageError("Remote API is not configured")
        return self.context.api

    def _require_user(self) -> str:
        user_id = self.context.user_id()
        if not user_id:
            raise PageError("User not authenticated")
        return user_id


class LandingPage(Page):
    name = "landing"

    def render(self, params: Dict[str, str]) -> Payload:
        return {"page": self.name, "actions": ["login", "register"]}


class LoginPage(Page):
    name = "login"


class RegisterPage(Page):
    name = "register"


class DashboardPage(Page):
    name = "dashboard"
    recent_limit = 5

    def render(self, params: Dict[str, str]) -> Payload:
        session = self.context.session_store.get()
        recent = [scan_summary(record) for record in self.context.cache.records()[: self.recent_limit]]
        return {
            "page": self.name,
            "user": {
                "uid": session.user_id if session else None,
                "email": session.email if session else None,
                "name": session.name if session else None,
            },
            "recentScans": recent,
        }


class ResultPage(Page):
    """Shows a freshly produced scan from the local cache."""

    name = "result"

    def render(self, params: Dict[str, str]) -> Payload:
        scan_id = params.get("scanId")
        if not scan_id:
            raise PageError("No scan ID provided")
        record = self.context.cache.get(scan_id)
        if record is None:
            raise PageError("Scan result not found")
        return {"page": self.name, "scan": record.to_dict()}


class ResultDetailPage(Page):
    """Shows a saved scan fetched from the backend."""

    name = "result-detail"

    def render(self, params: Dict[str, str]) -> Payload:
        scan_id = params.get("scanId")
        if not scan_id:
            raise PageError("No scan ID provided")
        user_id = self._require_user()
        record = self._require_api().get_scan(user_id, scan_id)
        return {"page": self.name, "scan": record.to_dict()}


class HistoryPage(Page):
    name = "history"

    def render(self, params: Dict[str, str]) -> Payload:
        user_id = self._require_user()
        remote = self._require_api().list_scans(user_id)
        scans = merge_history(self.context.cache.records(), remote)

        sort = params.get("sort", "newest")
        label_filter = params.get("filter", "all")
        try:
            page = int(params.get("page", "1"))
        except ValueError:
            page = 1
        per_page = int(self.context.config.get("history", {}).get("per_page", 9))

        ordered = filter_and_sort(scans, label_filter=label_filter, sort=sort)
        items, total_pages = paginate(ordered, page=page, per_page=per_page)
        return {
            "page": self.name,
            "total": len(ordered),
            "pageNumber": min(max(1, page), total_pages),
            "totalPages": total_pages,
            "scans": [scan_summary(record) for record in items],
        }


class ArticlePage(Page):
    name = "article"

    def render(self, params: Dict[str, str]) -> Payload:
        return {"page": self.name, "articles": list(ARTICLES)}


class ArticleDetailPage(Page):
    name = "article-detail"

    def render(self, params: Dict[str, str]) -> Payload:
        slug = params.get("slug")
        for article in ARTICLES:
            if article["slug"] == slug:
                return {"page": self.name, "article": article}
        raise PageError(f"Article {slug!r} not found")


PAGES: Dict[str, Type[Page]] = {
    "/": LandingPage,
    "/login": LoginPage,
    "/register": RegisterPage,
    "/dashboard": DashboardPage,
    "/result": ResultPage,
    "/result-detail": ResultDetailPage,
    "/history": HistoryPage,
    "/article": ArticlePage,
    "/article-detail": ArticleDetailPage,
}


def page_for(path: str, context: AppContext) -> Page:
    return PAGES.get(path, LandingPage)(context)


class App:
    """Renders whatever the navigator's location points at.

    Subscribes to the navigator so gate redirects re-render automatically.
    """

    def __init__(self, context: AppContext) -> None:
        self.context = context
        self.last_rendered: Optional[Payload] = None
        context.navigator.add_listener(self._on_location_change)

    def _on_location_change(self, _location: str) -> None:
        self.render_page()

    def render_page(self) -> Optional[Payload]:
        location = self.context.navigator.current()
        route = resolve_route(location.path)
        if not check_auth(route, location.path, self.context.has_token(), self.context.navigator.navigate):
            logger.debug("Render of %s blocked by auth gate", location.path)
            return None

        controller = page_for(route.path, self.context)
        try:
            payload = controller.render(location.query)
        except AuthExpired as exc:
            self.context.navigator.navigate(LOGIN_PATH)
            payload = self._error_payload(route.path, str(exc))
        except NotFound as exc:
            payload = self._error_payload(route.path, str(exc))
        except (PageError, APIError, StorageQuotaExceeded, StorageUnavailable, ValueError) as exc:
            logger.error("Failed to render %s: %s", route.path, exc)
            payload = self._error_payload(route.path, str(exc))
        else:
            payload = dict(payload, title=route.title, path=route.path, status="ok")

        self.last_rendered = payload
        return payload

    @staticmethod
    def _error_payload(path: str, message: str) -> Payload:
        return {"page": "error", "path": path, "status": "error", "message": message}

    def open(self, url: str) -> Optional[Payload]:
        """Navigate to ``url`` and return the last page rendered."""
        self.last_rendered = None
        self.context.navigator.navigate(url)
        self.context.navigator.flush()
        return self.last_rendered
