"""Biz-Niz Pro - Main FastAPI Application.

This module provides the FastAPI application for the turnaround engine.
It includes:
- CORS middleware configuration
- Session cookie middleware
- Server-rendered pages and form actions
- JSON session snapshot (/api/v1/session)
- Health check endpoint
- Exception handlers mapping session errors to HTTP status codes

Usage:
    uvicorn bizniz.api.main:app --reload
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

import structlog
from fastapi import APIRouter, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bizniz import __version__
from bizniz.api.dependencies import get_registry, reset_dependencies
from bizniz.api.middleware import SessionCookieMiddleware
from bizniz.api.models import ErrorResponse
from bizniz.api.routes.health import router as health_router
from bizniz.api.routes.pages import router as pages_router
from bizniz.api.routes.session import router as session_router
from bizniz.config.settings import get_settings
from bizniz.core.exceptions import (
    NoActiveReportError,
    OperationInProgressError,
    SessionError,
    UnknownBusinessError,
)

logger = structlog.get_logger(__name__)

API_TITLE = "Biz-Niz Pro"
API_DESCRIPTION = """
## AI Turnaround Strategy Engine

Find poorly-rated local businesses, generate a strategic turnaround report
for one of them, illustrate it with a concept image or a short video, and
export the findings as a PDF.
"""


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown events:
    - Startup: log configuration
    - Shutdown: abandon pending media work in every session
    """
    settings = get_settings()
    logger.info(
        "application_starting",
        environment=settings.app_env,
        key_configured=settings.gemini_api_key is not None,
    )

    yield

    logger.info("application_stopping")
    await get_registry().close()
    reset_dependencies()
    logger.info("application_stopped")


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=[
        {"name": "Health", "description": "System health"},
        {"name": "Session", "description": "Per-browser session state"},
    ],
)

_settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Accept"],
)
app.add_middleware(SessionCookieMiddleware)


# =============================================================================
# Exception Handlers
# =============================================================================


def _error_response(request: Request, status_code: int, error: str, exc: Exception) -> JSONResponse:
    response = ErrorResponse(
        error=error,
        message=str(exc),
        path=request.url.path,
        timestamp=datetime.now(timezone.utc),
    )
    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))


@app.exception_handler(UnknownBusinessError)
async def unknown_business_handler(request: Request, exc: UnknownBusinessError) -> JSONResponse:
    logger.warning("unknown_business", business_id=exc.business_id)
    return _error_response(request, status.HTTP_404_NOT_FOUND, "unknown_business", exc)


@app.exception_handler(OperationInProgressError)
async def operation_in_progress_handler(
    request: Request, exc: OperationInProgressError
) -> JSONResponse:
    logger.info("operation_rejected_busy", path=request.url.path)
    return _error_response(request, status.HTTP_409_CONFLICT, "operation_in_progress", exc)


@app.exception_handler(NoActiveReportError)
async def no_active_report_handler(request: Request, exc: NoActiveReportError) -> JSONResponse:
    return _error_response(request, status.HTTP_409_CONFLICT, "no_active_report", exc)


@app.exception_handler(SessionError)
async def session_error_handler(request: Request, exc: SessionError) -> JSONResponse:
    return _error_response(request, status.HTTP_400_BAD_REQUEST, "session_error", exc)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
    )

    response = ErrorResponse(
        error="internal_server_error",
        message="An unexpected error occurred",
        detail=str(exc) if get_settings().debug else None,
        path=request.url.path,
        timestamp=datetime.now(timezone.utc),
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=response.model_dump(mode="json"),
    )


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router)
app.include_router(pages_router)

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(session_router)
app.include_router(api_v1_router)
