"""Server-rendered pages and form actions.

Every form action mutates the caller's TurnaroundSession and redirects (303)
back to ``/``, which renders whichever view the session state calls for:
the key-selection page, the search view or the analysis view.
"""

from pathlib import Path

import structlog
from fastapi import APIRouter, Depends, Form, HTTPException, Request, Response, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from bizniz.api.models import LocationRequest
from bizniz.api.dependencies import get_session
from bizniz.delivery.charts import format_star_rating, radar_chart_svg, safe_link, severity_colour
from bizniz.models.schemas import AnalysisState, AspectRatio, GeoPoint, ImageSize
from bizniz.orchestration.session import TurnaroundSession

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Pages"])

TEMPLATES_DIR = Path(__file__).resolve().parent.parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["stars"] = format_star_rating
templates.env.filters["severity_colour"] = severity_colour
templates.env.filters["safe_link"] = safe_link
templates.env.globals["radar_chart"] = radar_chart_svg


def _home() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


# =============================================================================
# Views
# =============================================================================


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index(request: Request, session: TurnaroundSession = Depends(get_session)):
    """Render the view for the current session state."""
    snapshot = session.snapshot()
    context = {
        "session": snapshot,
        "states": AnalysisState,
        "image_sizes": list(ImageSize),
        "aspect_ratios": list(AspectRatio),
    }

    if not snapshot.credentials_granted:
        template = "credentials.html"
    elif snapshot.report is not None and snapshot.selected_business is not None:
        template = "analysis.html"
    else:
        template = "search.html"

    return templates.TemplateResponse(request, template, context)


# =============================================================================
# Form Actions
# =============================================================================


@router.post("/credentials", include_in_schema=False)
async def grant_credentials(
    api_key: str = Form(""),
    session: TurnaroundSession = Depends(get_session),
) -> RedirectResponse:
    session.grant_credentials(api_key)
    return _home()


@router.post("/search", include_in_schema=False)
async def search(
    industry: str = Form(""),
    location: str = Form(""),
    session: TurnaroundSession = Depends(get_session),
) -> RedirectResponse:
    await session.search(industry, location)
    return _home()


@router.post("/businesses/{business_id}/analyze", include_in_schema=False)
async def analyze(
    business_id: str,
    session: TurnaroundSession = Depends(get_session),
) -> RedirectResponse:
    await session.analyze(business_id)
    return _home()


@router.post("/back", include_in_schema=False)
async def back(session: TurnaroundSession = Depends(get_session)) -> RedirectResponse:
    session.back()
    return _home()


@router.post("/reset", include_in_schema=False)
async def reset(session: TurnaroundSession = Depends(get_session)) -> RedirectResponse:
    session.reset()
    return _home()


@router.post("/media/image", include_in_schema=False)
async def generate_image(
    size: ImageSize = Form(ImageSize.ONE_K),
    session: TurnaroundSession = Depends(get_session),
) -> RedirectResponse:
    session.start_image_generation(size)
    return _home()


@router.post("/media/video", include_in_schema=False)
async def generate_video(
    ratio: AspectRatio = Form(AspectRatio.LANDSCAPE),
    session: TurnaroundSession = Depends(get_session),
) -> RedirectResponse:
    session.start_video_generation(ratio)
    return _home()


@router.post("/location", status_code=status.HTTP_204_NO_CONTENT, include_in_schema=False)
async def capture_location(
    body: LocationRequest,
    session: TurnaroundSession = Depends(get_session),
) -> Response:
    session.capture_geolocation(GeoPoint(latitude=body.latitude, longitude=body.longitude))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Downloads
# =============================================================================


@router.get("/report.pdf", include_in_schema=False)
async def export_pdf(session: TurnaroundSession = Depends(get_session)) -> Response:
    filename, content = session.export_pdf()
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/media/videos/{handle}", include_in_schema=False)
async def stream_video(
    handle: str,
    session: TurnaroundSession = Depends(get_session),
) -> Response:
    item = session.service.media_store.get(handle)
    if item is None:
        raise HTTPException(status_code=404, detail="Video not found")
    return Response(content=item.content, media_type=item.mime_type)
