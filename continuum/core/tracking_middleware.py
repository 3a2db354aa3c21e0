"""Page-view tracking and stored-redirect middleware."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable

from redis import Redis, RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from continuum.core.config import get_settings
from continuum.core.redis import get_client
from continuum.repositories.seo_repo import SeoRepository
from continuum.services.analytics_service import AnalyticsService

logger = logging.getLogger(__name__)

SESSION_COOKIE = "analytics_session"
UNTRACKED_PREFIXES = ("/api", "/static", "/health", "/docs", "/redoc", "/openapi")

RedisProvider = Callable[[], Redis]  # type: ignore[type-arg]


def is_trackable(path: str) -> bool:
    """Page paths only: no API, static, health or dotted (file) paths."""
    if path.startswith(UNTRACKED_PREFIXES):
        return False
    return "." not in path


class PageTrackingMiddleware(BaseHTTPMiddleware):
    """Records a page view, bot visit, traffic source and visitor session.

    Tracking runs after the response is produced and never fails the request.
    """

    def __init__(self, app: ASGIApp, redis_provider: RedisProvider = get_client) -> None:
        super().__init__(app)
        self.redis_provider = redis_provider

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)

        path = request.url.path
        if request.method != "GET" or not is_trackable(path):
            return response

        settings = get_settings()
        session_id = request.cookies.get(SESSION_COOKIE)
        new_session = session_id is None
        if new_session:
            session_id = uuid.uuid4().hex

        try:
            service = AnalyticsService(self.redis_provider(), settings)
        except RuntimeError:
            logger.warning("Analytics skipped, Redis not initialized")
            return response
        await service.track_request(
            path=path,
            user_agent=request.headers.get("user-agent"),
            referer=request.headers.get("referer"),
            session_id=session_id,
        )

        if new_session:
            response.set_cookie(
                SESSION_COOKIE,
                session_id,
                max_age=settings.analytics_session_seconds,
                httponly=True,
                samesite="lax",
            )
        return response


class RedirectMiddleware(BaseHTTPMiddleware):
    """Answers paths with a stored redirect before routing."""

    def __init__(self, app: ASGIApp, redis_provider: RedisProvider = get_client) -> None:
        super().__init__(app)
        self.redis_provider = redis_provider

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if request.method in ("GET", "HEAD") and not path.startswith(UNTRACKED_PREFIXES):
            try:
                redirect = await SeoRepository(self.redis_provider()).get_redirect_for_path(path)
            except (RedisError, RuntimeError):
                logger.warning("Redirect lookup failed", extra={"path": path}, exc_info=True)
                redirect = None
            if redirect is not None:
                return RedirectResponse(redirect.destination, status_code=redirect.status_code)
        return await call_next(request)
