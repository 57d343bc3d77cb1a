"""Hash-route table, location parsing, auth gate and navigation."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Callable, Deque, Dict, List, Optional
from urllib.parse import parse_qsl

from acure_cli.core.models import ParsedLocation, Route

logger = logging.getLogger(__name__)

ROUTES: Dict[str, Route] = {
    "/": Route("/", "landing-page", "Landing Page", requires_auth=False),
    "/login": Route("/login", "login-page", "Login Page", requires_auth=False),
    "/register": Route("/register", "register-page", "Register Page", requires_auth=False),
    "/dashboard": Route("/dashboard", "dashboard-page", "Dashboard Page", requires_auth=True),
    "/result": Route("/result", "result-page", "Result Page", requires_auth=True),
    "/result-detail": Route(
        "/result-detail", "result-detail-page", "Result Detail Page", requires_auth=True
    ),
    "/history": Route("/history", "history-page", "History Page", requires_auth=True),
    "/article": Route("/article", "article-page", "Article Page", requires_auth=True),
    "/article-detail": Route(
        "/article-detail", "article-detail-page", "Article Detail Page", requires_auth=True
    ),
}

GUEST_ONLY_PATHS = frozenset({"/", "/login", "/register"})
LOGIN_PATH = "/login"
HOME_PATH = "/dashboard"


def parse_location(hash_value: Optional[str]) -> ParsedLocation:
    """Split ``#/path?k=v`` into path and query map. Never raises."""
    if not isinstance(hash_value, str):
        return ParsedLocation("/", {})

    clean = hash_value[1:] if hash_value.startswith("#") else hash_value
    if not clean or clean == "/":
        return ParsedLocation("/", {})

    path, _, query_string = clean.partition("?")
    query: Dict[str, str] = {}
    if query_string:
        for key, value in parse_qsl(query_string, keep_blank_values=True):
            query[key] = value
    return ParsedLocation(path or "/", query)


def resolve_route(path: str) -> Route:
    """Look up a route, falling back to the root route."""
    return ROUTES.get(path) or ROUTES["/"]


def check_auth(
    route: Route,
    current_path: str,
    has_token: bool,
    navigate: Callable[[str], None],
) -> bool:
    """Return True when ``route`` may render; otherwise redirect and return False."""
    if route.requires_auth and not has_token:
        navigate(LOGIN_PATH)
        return False

    if not route.requires_auth and has_token and current_path in GUEST_ONLY_PATHS:
        navigate(HOME_PATH)
        return False

    return True


LocationListener = Callable[[str], None]


class Navigator:
    """Holds the current hash location and notifies listeners on change.

    Assigning the location does not notify listeners directly; every
    :meth:`navigate` call schedules its own notification for the next tick.
    With a running event loop that is ``loop.call_soon``; otherwise the
    notification waits in a queue until :meth:`flush`.
    """

    def __init__(self, location: str = "#/") -> None:
        self.location = location
        self._listeners: List[LocationListener] = []
        self._pending: Deque[Callable[[], None]] = deque()

    @staticmethod
    def normalize(url: str) -> str:
        return url if url.startswith("#") else f"#{url}"

    def add_listener(self, listener: LocationListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: LocationListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def current(self) -> ParsedLocation:
        return parse_location(self.location)

    def navigate(self, url: str) -> None:
        target = self.normalize(url)
        logger.debug("Navigating to %s", target)
        self.location = target
        self._schedule(self._emit)

    def _schedule(self, callback: Callable[[], None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._pending.append(callback)
            return
        loop.call_soon(callback)

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self.location)

    def has_pending(self) -> bool:
        return bool(self._pending)

    def flush(self, limit: int = 100) -> int:
        """Deliver queued notifications, including ones queued while delivering."""
        delivered = 0
        while self._pending and delivered < limit:
            callback = self._pending.popleft()
            callback()
            delivered += 1
        if self._pending:
            logger.warning("Stopped after %d location notifications; %d pending", limit, len(self._pending))
        return delivered
