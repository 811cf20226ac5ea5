"""
Page access middleware.

Sends visitors of the HTML pages to the dashboard that matches their session
and stamps security headers on every response. API routes do their own
authorization through dependencies and are only given the headers.
"""

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.core import security
from app.core.config import settings
from app.core.logging import get_logger
from app.models.user import Role

logger = get_logger(__name__)

UNGUARDED_PREFIXES = (
    "/api",
    "/static",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/health",
)

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

DASHBOARDS = {Role.ADMIN: "/admin", Role.EMPLOYEE: "/employee"}


def _matches(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def is_protected(path: str) -> bool:
    return _matches(path, "/admin") or _matches(path, "/employee")


def is_guarded(path: str) -> bool:
    return not any(path.startswith(prefix) for prefix in UNGUARDED_PREFIXES)


def resolve_redirect(path: str, token_present: bool, session) -> str | None:
    """Where a page request should be sent instead, or ``None`` to serve it."""
    if not token_present:
        return "/" if is_protected(path) else None
    if session is None:
        return "/"

    dashboard = DASHBOARDS[session.role]
    if _matches(path, "/admin") and session.role != Role.ADMIN:
        return dashboard
    if _matches(path, "/employee") and session.role != Role.EMPLOYEE:
        return dashboard
    if path in ("/", "/login"):
        return dashboard
    return None


class SessionGuardMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not is_guarded(path):
            response = await call_next(request)
            response.headers.update(SECURITY_HEADERS)
            return response

        token_present = settings.COOKIE_NAME in request.cookies
        session = security.get_session(request)
        target = resolve_redirect(path, token_present, session)

        if target is not None and target != path:
            response = RedirectResponse(target, status_code=307)
        else:
            response = await call_next(request)
            if is_protected(path):
                response.headers.update(security.NO_CACHE_HEADERS)

        if token_present and session is None:
            logger.info(f"Invalid session cookie on {path}, clearing it")
            security.remove_auth_cookie(response)

        response.headers.update(SECURITY_HEADERS)
        return response
