"""Middleware package for the Biz-Niz Pro API.

Provides custom middleware components for the FastAPI application.
"""

from bizniz.api.middleware.session_cookie import SessionCookieMiddleware

__all__ = ["SessionCookieMiddleware"]
