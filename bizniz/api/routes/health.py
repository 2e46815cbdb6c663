"""Health check endpoint for the Biz-Niz Pro API."""

from fastapi import APIRouter

from bizniz import __version__
from bizniz.api.dependencies import get_registry
from bizniz.api.models import HealthResponse
from bizniz.config.settings import get_settings

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
)
async def health_check() -> HealthResponse:
    """Report that the process is up. No external service is contacted."""
    return HealthResponse(
        version=__version__,
        environment=get_settings().app_env,
        active_sessions=len(get_registry()),
    )
