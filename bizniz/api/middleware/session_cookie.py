"""Session cookie middleware.

Assigns every browser a random session identifier, exposes it to route
handlers as ``request.state.session_id`` and sets the cookie on the way out
when the browser did not send one.

Usage:
    from bizniz.api.middleware import SessionCookieMiddleware

    app = FastAPI()
    app.add_middleware(SessionCookieMiddleware)
"""

import re

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from bizniz.config.settings import get_settings
from bizniz.orchestration.registry import SessionRegistry

logger = structlog.get_logger(__name__)

_SESSION_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


class SessionCookieMiddleware(BaseHTTPMiddleware):
    """Attach a session id to each request, issuing a cookie when missing."""

    async def dispatch(self, request: Request, call_next):
        settings = get_settings()
        cookie_name = settings.session_cookie_name

        session_id = request.cookies.get(cookie_name, "")
        is_new = not _SESSION_ID_PATTERN.match(session_id)
        if is_new:
            session_id = SessionRegistry.new_session_id()
            logger.debug("session_cookie_issued", path=request.url.path)

        request.state.session_id = session_id
        response = await call_next(request)

        if is_new:
            response.set_cookie(
                cookie_name,
                session_id,
                httponly=True,
                samesite="lax",
                secure=settings.is_production,
            )
        return response
