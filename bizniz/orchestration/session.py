"""
Turnaround session - the root orchestrator.

Owns the per-browser state (business list, selected business, active report,
media panels, messages), sequences the service calls in response to user
actions, and converts every service failure into session state.

State machine (top level):

    IDLE/ERROR --search--> SEARCHING --ok--> IDLE
                                     --fail--> ERROR
    IDLE/ERROR --analyze--> ANALYZING --ok--> IDLE (report active)
                                      --fail--> ERROR

Media panels run independently of each other and of the top level:

    image: IDLE --> GENERATING_IMAGE --> IDLE
    video: IDLE --> GENERATING_VIDEO --> IDLE

Results that arrive after the user has navigated away (back, reset, a new
analysis) are dropped by comparing view epochs. Each search or analysis also
holds an operation token; once a newer action or a reset supersedes it, the
operation no longer touches state, messages or credentials.
"""

import asyncio
from typing import Optional

import structlog

from bizniz.config.settings import Settings, get_settings
from bizniz.core.credentials import CredentialProvider
from bizniz.core.exceptions import (
    AnalysisError,
    CredentialExpiredError,
    DiscoveryError,
    ImageGenerationError,
    NoActiveReportError,
    OperationInProgressError,
    UnknownBusinessError,
    VideoGenerationCancelledError,
    VideoGenerationError,
)
from bizniz.delivery.pdf_export import build_analysis_pdf, pdf_filename
from bizniz.models.schemas import (
    AnalysisReport,
    AnalysisState,
    AspectRatio,
    Business,
    GeoPoint,
    ImageSize,
    MediaPanel,
    SessionSnapshot,
)
from bizniz.services.gemini_service import GeminiService

logger = structlog.get_logger(__name__)


# =============================================================================
# User-facing messages
# =============================================================================

NO_RESULTS_MESSAGE = "No businesses with poor reviews found."
SEARCH_FAILED_MESSAGE = "Search failed. Please try a different location or industry."
CREDENTIAL_EXPIRED_MESSAGE = "API Key session expired. Please re-select your key."
ANALYSIS_FAILED_MESSAGE = "Analysis failed. Try again in a few moments."
VIDEO_FAILED_MESSAGE = "Video generation failed. Please try again."

# Cosmetic only: shown on a timer, not tied to server-side progress.
VIDEO_STATUS_START = "Consulting the AI strategy engine..."
VIDEO_STATUS_STEPS = (
    "Rendering high-fidelity consultation visuals...",
    "Finalizing AI business pitch...",
)

_BUSY_STATES = (AnalysisState.SEARCHING, AnalysisState.ANALYZING)


class TurnaroundSession:
    """In-memory state and action sequencing for one browser session."""

    def __init__(
        self,
        service: GeminiService,
        credentials: CredentialProvider,
        settings: Optional[Settings] = None,
        geolocation: Optional[GeoPoint] = None,
    ):
        self.service = service
        self.credentials = credentials
        self._settings = settings or get_settings()

        self.state = AnalysisState.IDLE
        self.message: Optional[str] = None
        self.businesses: list[Business] = []
        self.selected_business: Optional[Business] = None
        self.report: Optional[AnalysisReport] = None
        self.image_panel = MediaPanel()
        self.video_panel = MediaPanel()

        self._geolocation = geolocation
        self._operation = 0
        self._epoch = 0
        self._tasks: set[asyncio.Task] = set()
        self._video_cancel: Optional[asyncio.Event] = None
        self._status_timers: list[asyncio.TimerHandle] = []

    # -------------------------------------------------------------------------
    # Credentials & geolocation
    # -------------------------------------------------------------------------

    @property
    def has_credentials(self) -> bool:
        return self.credentials.is_granted()

    def grant_credentials(self, api_key: Optional[str] = None) -> bool:
        granted = self.credentials.request_grant(api_key)
        if granted and self.message == CREDENTIAL_EXPIRED_MESSAGE:
            self.message = None
        return granted

    @property
    def geolocation(self) -> Optional[GeoPoint]:
        return self._geolocation

    def capture_geolocation(self, point: Optional[GeoPoint]) -> bool:
        """Keep the first coordinates received. Returns True if stored."""
        if point is None or self._geolocation is not None:
            return False
        self._geolocation = point
        logger.info("geolocation_captured")
        return True

    # -------------------------------------------------------------------------
    # Search & analysis
    # -------------------------------------------------------------------------

    def _ensure_not_busy(self) -> None:
        if self.state in _BUSY_STATES:
            raise OperationInProgressError(f"Cannot start while {self.state.value.lower()}")

    def _start_operation(self) -> int:
        self._operation += 1
        return self._operation

    def _is_current(self, token: int) -> bool:
        return token == self._operation

    async def search(self, industry: str, location: str) -> list[Business]:
        """Run discovery and replace the business list.

        Blank input is ignored. Failures are converted to ``message`` and the
        ERROR state; an empty result is not an error. A search superseded by a
        reset or a newer action leaves the session untouched when it returns.
        """
        industry, location = (industry or "").strip(), (location or "").strip()
        if not industry or not location:
            logger.info("search_ignored_blank_input")
            return self.businesses

        self._ensure_not_busy()
        self._leave_analysis_view()
        self.state = AnalysisState.SEARCHING
        self.message = None
        self.businesses = []
        token = self._start_operation()

        try:
            result = await self.service.find_businesses(industry, location, self._geolocation)
        except CredentialExpiredError:
            if not self._is_current(token):
                logger.info("search_failure_discarded", reason="credential_expired")
                return self.businesses
            self.credentials.revoke()
            self._fail(CREDENTIAL_EXPIRED_MESSAGE)
            return self.businesses
        except DiscoveryError:
            if not self._is_current(token):
                logger.info("search_failure_discarded", reason="discovery_failed")
                return self.businesses
            self._fail(SEARCH_FAILED_MESSAGE)
            return self.businesses

        if not self._is_current(token):
            logger.info("search_result_discarded")
            return self.businesses

        self.businesses = list(result.businesses)
        if not self.businesses:
            self.message = NO_RESULTS_MESSAGE
        self.state = AnalysisState.IDLE
        return self.businesses

    def find_business(self, business_id: str) -> Business:
        for business in self.businesses:
            if business.id == business_id:
                return business
        raise UnknownBusinessError(business_id)

    async def analyze(self, business_id: str) -> Optional[AnalysisReport]:
        """Select a business and produce its turnaround report."""
        business = self.find_business(business_id)
        self._ensure_not_busy()
        self._leave_analysis_view()
        self.state = AnalysisState.ANALYZING
        self.message = None
        self.selected_business = business
        token = self._start_operation()
        epoch = self._epoch

        try:
            report = await self.service.analyze_business(business)
        except AnalysisError:
            if not self._is_current(token):
                logger.info("analysis_failure_discarded", business_id=business.id)
                return None
            if epoch != self._epoch:
                self.state = AnalysisState.IDLE
                return None
            self.selected_business = None
            self._fail(ANALYSIS_FAILED_MESSAGE)
            return None

        if not self._is_current(token):
            logger.info("analysis_result_discarded", business_id=business.id)
            return None
        if epoch != self._epoch:
            # Back during analysis: the view is gone but this call still owns the state.
            logger.info("analysis_result_discarded", business_id=business.id)
            self.state = AnalysisState.IDLE
            return None

        self.report = report
        self.state = AnalysisState.IDLE
        return report

    def _fail(self, message: str) -> None:
        self.message = message
        self.state = AnalysisState.ERROR

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def back(self) -> None:
        """Leave the analysis view, keeping the current search results."""
        self._leave_analysis_view()
        if self.state not in _BUSY_STATES:
            self.state = AnalysisState.IDLE

    def reset(self) -> None:
        """Return to an empty search view."""
        self._leave_analysis_view()
        self._operation += 1
        self.businesses = []
        self.message = None
        self.state = AnalysisState.IDLE

    def _leave_analysis_view(self) -> None:
        self._epoch += 1
        if self._video_cancel is not None:
            self._video_cancel.set()
            self._video_cancel = None
        self._clear_status_timers()
        for task in list(self._tasks):
            task.cancel()
        for panel in (self.image_panel, self.video_panel):
            if panel.video is not None:
                self.service.media_store.discard(panel.video.handle)
        self.image_panel = MediaPanel()
        self.video_panel = MediaPanel()
        self.report = None
        self.selected_business = None

    # -------------------------------------------------------------------------
    # Media
    # -------------------------------------------------------------------------

    def _require_report(self) -> tuple[Business, AnalysisReport]:
        if self.report is None or self.selected_business is None:
            raise NoActiveReportError("No active analysis report")
        return self.selected_business, self.report

    def start_image_generation(self, size: ImageSize = ImageSize.ONE_K) -> asyncio.Task:
        """Fire-and-forget image generation. The task is owned by the session."""
        business, report = self._require_report()
        if self.image_panel.is_busy:
            raise OperationInProgressError("Image generation already running")
        self.image_panel = MediaPanel(state=AnalysisState.GENERATING_IMAGE)
        return self._spawn(self._run_image(business, report, ImageSize(size), self._epoch))

    def start_video_generation(self, ratio: AspectRatio = AspectRatio.LANDSCAPE) -> asyncio.Task:
        """Fire-and-forget video generation with cosmetic status updates."""
        business, report = self._require_report()
        if self.video_panel.is_busy:
            raise OperationInProgressError("Video generation already running")
        self.video_panel = MediaPanel(state=AnalysisState.GENERATING_VIDEO, status=VIDEO_STATUS_START)
        self._video_cancel = asyncio.Event()
        self._schedule_status_messages()
        cancel = self._video_cancel
        return self._spawn(self._run_video(business, report, AspectRatio(ratio), self._epoch, cancel))

    async def generate_image(self, size: ImageSize = ImageSize.ONE_K) -> MediaPanel:
        await self.start_image_generation(size)
        return self.image_panel

    async def generate_video(self, ratio: AspectRatio = AspectRatio.LANDSCAPE) -> MediaPanel:
        await self.start_video_generation(ratio)
        return self.video_panel

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_image(
        self, business: Business, report: AnalysisReport, size: ImageSize, epoch: int
    ) -> None:
        try:
            image = await self.service.generate_visual_report(
                business.name, report.recurring_themes, size
            )
        except ImageGenerationError as e:
            # No user-facing message for image failures.
            logger.warning("image_generation_failed", business_id=business.id, error=str(e))
            if epoch == self._epoch:
                self.image_panel = MediaPanel()
            return

        if epoch != self._epoch:
            logger.info("image_result_discarded", business_id=business.id)
            return
        self.image_panel = MediaPanel(image=image)

    async def _run_video(
        self,
        business: Business,
        report: AnalysisReport,
        ratio: AspectRatio,
        epoch: int,
        cancel: asyncio.Event,
    ) -> None:
        try:
            video = await self.service.generate_explanation_video(
                business.name, report.summary, ratio, cancel_event=cancel
            )
        except VideoGenerationCancelledError:
            logger.info("video_generation_abandoned", business_id=business.id)
            if epoch == self._epoch:
                self._finish_video(cancel)
                self.video_panel = MediaPanel()
            return
        except VideoGenerationError as e:
            logger.error("video_generation_failed", business_id=business.id, error=str(e))
            if epoch == self._epoch:
                self._finish_video(cancel)
                self.video_panel = MediaPanel(message=VIDEO_FAILED_MESSAGE)
            return

        if epoch != self._epoch:
            logger.info("video_result_discarded", business_id=business.id)
            self.service.media_store.discard(video.handle)
            return
        self._finish_video(cancel)
        self.video_panel = MediaPanel(video=video)

    def _finish_video(self, cancel: asyncio.Event) -> None:
        self._clear_status_timers()
        if self._video_cancel is cancel:
            self._video_cancel = None

    def _schedule_status_messages(self) -> None:
        self._clear_status_timers()
        loop = asyncio.get_running_loop()
        offsets = self._settings.video_status_offsets_seconds
        for offset, text in zip(offsets, VIDEO_STATUS_STEPS):
            self._status_timers.append(loop.call_later(offset, self._set_video_status, text))

    def _set_video_status(self, text: str) -> None:
        if self.video_panel.state == AnalysisState.GENERATING_VIDEO:
            self.video_panel.status = text

    def _clear_status_timers(self) -> None:
        for handle in self._status_timers:
            handle.cancel()
        self._status_timers = []

    async def close(self) -> None:
        """Abandon pending media work."""
        self._leave_analysis_view()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    # -------------------------------------------------------------------------
    # Export & views
    # -------------------------------------------------------------------------

    def export_pdf(self) -> tuple[str, bytes]:
        """Return (filename, content) for the active report."""
        business, report = self._require_report()
        content = build_analysis_pdf(business.name, business.location, report.summary)
        logger.info("pdf_exported", business_id=business.id, size_bytes=len(content))
        return pdf_filename(business.name), content

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            state=self.state,
            credentials_granted=self.has_credentials,
            message=self.message,
            geolocation=self._geolocation,
            businesses=list(self.businesses),
            selected_business=self.selected_business,
            report=self.report,
            image_panel=self.image_panel.model_copy(),
            video_panel=self.video_panel.model_copy(),
        )
