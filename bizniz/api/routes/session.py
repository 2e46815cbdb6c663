"""JSON view of the caller's session state."""

from fastapi import APIRouter, Depends

from bizniz.api.dependencies import get_session
from bizniz.models.schemas import SessionSnapshot
from bizniz.orchestration.session import TurnaroundSession

router = APIRouter(prefix="/session", tags=["Session"])


@router.get(
    "",
    response_model=SessionSnapshot,
    summary="Get session state",
    description="Current state, business list, active report and media panels for this browser session.",
)
async def get_session_snapshot(
    session: TurnaroundSession = Depends(get_session),
) -> SessionSnapshot:
    return session.snapshot()
