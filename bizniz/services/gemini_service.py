"""
Gemini Service - the four hosted-model operations behind the turnaround engine.

- find_businesses: Maps/Search grounded discovery followed by a structured
  extraction call.
- analyze_business: Search grounded strategic analysis constrained to the
  report schema.
- generate_visual_report: 16:9 storefront concept image.
- generate_explanation_video: long-running video synthesis, polled until done
  and downloaded into the local media store.

A fresh ``genai.Client`` is built per call from the injected credential
provider, so a key re-granted from the UI takes effect immediately.

Example:
    service = GeminiService(ApiKeyCredentialProvider("..."))
    result = await service.find_businesses("Sushi Restaurant", "Springfield")
    report = await service.analyze_business(result.businesses[0])
"""

import asyncio
import base64
from typing import Any, Callable, Optional

import httpx
import structlog
from google import genai
from google.genai import types
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_result,
    stop_after_attempt,
    stop_never,
    wait_fixed,
)

from bizniz.config.settings import Settings, get_settings
from bizniz.core.credentials import CredentialProvider
from bizniz.core.exceptions import (
    AnalysisError,
    CredentialExpiredError,
    DiscoveryError,
    ImageGenerationError,
    NoImageGeneratedError,
    ServiceError,
    VideoDownloadError,
    VideoGenerationCancelledError,
    VideoGenerationError,
    VideoPollTimeoutError,
)
from bizniz.models.schemas import (
    AnalysisReport,
    AspectRatio,
    Business,
    DiscoveryResult,
    ExtractedBusinessList,
    GeneratedImage,
    GeneratedVideo,
    GeoPoint,
    GroundingSource,
    ImageSize,
)
from bizniz.services.media_store import MediaStore, video_url
from bizniz.services.prompts import (
    BUSINESS_LIST_SCHEMA,
    IMAGE_ASPECT_RATIO,
    REPORT_SCHEMA,
    build_analysis_prompt,
    build_discovery_prompt,
    build_extraction_prompt,
    build_image_prompt,
    build_video_prompt,
)

logger = structlog.get_logger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Substring of the rejection the service returns once the selected key/session
# is gone ("Requested entity was not found.").
SESSION_EXPIRED_MARKER = "entity was not found"

EMPTY_EXTRACTION = '{"businesses": []}'
DEFAULT_IMAGE_MIME = "image/png"
DEFAULT_VIDEO_MIME = "video/mp4"


# =============================================================================
# Helpers
# =============================================================================


def is_credential_expired(error: BaseException) -> bool:
    """True if the failure text carries the session-expired marker."""
    return SESSION_EXPIRED_MARKER in str(error).lower()


def extract_grounding_sources(response: Any) -> list[GroundingSource]:
    """Map grounding chunks of the first candidate to title/URI pairs.

    Maps sources win over web sources; a chunk with neither becomes the
    ``Source``/``#`` placeholder.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources = []
    for chunk in chunks:
        origin = getattr(chunk, "maps", None) or getattr(chunk, "web", None)
        if origin is None:
            sources.append(GroundingSource())
            continue
        sources.append(
            GroundingSource(
                title=getattr(origin, "title", None) or "Source",
                uri=getattr(origin, "uri", None) or "#",
            )
        )
    return sources


def _response_parts(response: Any) -> list[Any]:
    parts = getattr(response, "parts", None)
    if parts:
        return list(parts)
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    content = getattr(candidates[0], "content", None)
    return list(getattr(content, "parts", None) or [])


def _tool_config(geo: Optional[GeoPoint]) -> Optional[types.ToolConfig]:
    if geo is None:
        return None
    return types.ToolConfig(
        retrieval_config=types.RetrievalConfig(
            lat_lng=types.LatLng(latitude=geo.latitude, longitude=geo.longitude)
        )
    )


def _cancellable_sleep(cancel_event: Optional[asyncio.Event]) -> Callable[[float], Any]:
    """Sleep used between status checks; wakes early and raises on cancel."""

    async def _sleep(seconds: float) -> None:
        if cancel_event is None:
            await asyncio.sleep(seconds)
            return
        if cancel_event.is_set():
            raise VideoGenerationCancelledError("video", "Polling abandoned")
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        raise VideoGenerationCancelledError("video", "Polling abandoned")

    return _sleep


def _default_client_factory(api_key: str) -> genai.Client:
    return genai.Client(api_key=api_key)


# =============================================================================
# Service
# =============================================================================


class GeminiService:
    """Async client for the discovery, analysis and media operations."""

    def __init__(
        self,
        credentials: CredentialProvider,
        settings: Optional[Settings] = None,
        media_store: Optional[MediaStore] = None,
        client_factory: Optional[Callable[[str], Any]] = None,
        http_client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
    ):
        """Initialize the service.

        Args:
            credentials: Provider asked for the API key on every call.
            settings: Application settings. Loaded from the environment if omitted.
            media_store: Store receiving downloaded videos.
            client_factory: Builds a genai client from an API key.
            http_client_factory: Builds the httpx client used for video downloads.
        """
        self._settings = settings or get_settings()
        self._credentials = credentials
        self.media_store = media_store if media_store is not None else MediaStore()
        self._client_factory = client_factory or _default_client_factory
        self._http_client_factory = http_client_factory or self._default_http_client

    def _default_http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self._settings.media_download_timeout_seconds),
            follow_redirects=True,
        )

    def _client(self, operation: str) -> tuple[Any, str]:
        api_key = self._credentials.api_key()
        if not api_key:
            raise CredentialExpiredError(operation, "No API key granted")
        return self._client_factory(api_key), api_key

    # -------------------------------------------------------------------------
    # Discovery
    # -------------------------------------------------------------------------

    async def find_businesses(
        self,
        industry: str,
        location: str,
        geo: Optional[GeoPoint] = None,
    ) -> DiscoveryResult:
        """Find poorly-rated businesses and extract them into structured records.

        Raises:
            CredentialExpiredError: The key is missing or the service rejected the session.
            DiscoveryError: Any other failure of either call.
        """
        client, _ = self._client("discovery")
        logger.info("discovery_started", industry=industry, location=location, has_geo=geo is not None)

        try:
            response = await client.aio.models.generate_content(
                model=self._settings.discovery_model,
                contents=build_discovery_prompt(industry, location),
                config=types.GenerateContentConfig(
                    tools=[
                        types.Tool(google_maps=types.GoogleMaps()),
                        types.Tool(google_search=types.GoogleSearch()),
                    ],
                    tool_config=_tool_config(geo),
                ),
            )
            text = response.text or ""
            sources = extract_grounding_sources(response)

            extraction = await client.aio.models.generate_content(
                model=self._settings.extraction_model,
                contents=build_extraction_prompt(text),
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=BUSINESS_LIST_SCHEMA,
                ),
            )
            extracted = ExtractedBusinessList.model_validate_json(
                extraction.text or EMPTY_EXTRACTION
            )
        except Exception as e:
            if is_credential_expired(e):
                logger.warning("discovery_credential_expired", error=str(e))
                raise CredentialExpiredError(
                    "discovery", "API key session expired", {"error": str(e)}
                ) from e
            logger.error("discovery_failed", error=str(e), error_type=type(e).__name__)
            raise DiscoveryError("discovery", f"Search failed: {e}") from e

        named = [b for b in extracted.businesses if b.name.strip()]
        if len(named) < len(extracted.businesses):
            logger.warning(
                "discovery_dropped_unnamed",
                dropped=len(extracted.businesses) - len(named),
            )

        businesses = [
            Business(
                id=f"biz-{i}",
                name=b.name.strip(),
                location=b.location,
                rating=b.rating,
                complaints=b.complaints,
                sources=sources,
            )
            for i, b in enumerate(named)
        ]

        logger.info(
            "discovery_completed",
            business_count=len(businesses),
            source_count=len(sources),
        )
        return DiscoveryResult(businesses=businesses, sources=sources, raw_text=text)

    # -------------------------------------------------------------------------
    # Analysis
    # -------------------------------------------------------------------------

    async def analyze_business(self, business: Business) -> AnalysisReport:
        """Produce a turnaround report for one business. No retry.

        Raises:
            AnalysisError: Any failure, including a missing key or unparsable output.
        """
        try:
            client, _ = self._client("analysis")
        except CredentialExpiredError as e:
            raise AnalysisError("analysis", e.message) from e

        logger.info("analysis_started", business_id=business.id, business_name=business.name)
        try:
            response = await client.aio.models.generate_content(
                model=self._settings.analysis_model,
                contents=build_analysis_prompt(business),
                config=types.GenerateContentConfig(
                    tools=[types.Tool(google_search=types.GoogleSearch())],
                    response_mime_type="application/json",
                    response_schema=REPORT_SCHEMA,
                ),
            )
            report = AnalysisReport.model_validate_json(response.text or "{}")
        except (ValidationError, ValueError) as e:
            logger.error("analysis_unparsable", business_id=business.id, error=str(e))
            raise AnalysisError("analysis", "Model returned an unreadable report") from e
        except Exception as e:
            logger.error(
                "analysis_failed",
                business_id=business.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise AnalysisError("analysis", f"Analysis failed: {e}") from e

        logger.info(
            "analysis_completed",
            business_id=business.id,
            themes=len(report.recurring_themes),
            competitors=len(report.competitor_analysis),
        )
        return report

    # -------------------------------------------------------------------------
    # Image
    # -------------------------------------------------------------------------

    async def generate_visual_report(
        self,
        business_name: str,
        themes: list[str],
        size: ImageSize = ImageSize.ONE_K,
    ) -> GeneratedImage:
        """Generate the storefront concept image.

        Raises:
            NoImageGeneratedError: The response carried no image part.
            ImageGenerationError: The call itself failed.
        """
        size = ImageSize(size)
        try:
            client, _ = self._client("image")
        except CredentialExpiredError as e:
            raise ImageGenerationError("image", e.message) from e

        try:
            response = await client.aio.models.generate_content(
                model=self._settings.image_model,
                contents=[build_image_prompt(business_name, themes)],
                config=types.GenerateContentConfig(
                    image_config=types.ImageConfig(
                        aspect_ratio=IMAGE_ASPECT_RATIO,
                        image_size=size.value,
                    ),
                ),
            )
        except Exception as e:
            raise ImageGenerationError("image", f"Image request failed: {e}") from e

        for part in _response_parts(response):
            inline = getattr(part, "inline_data", None)
            data = getattr(inline, "data", None)
            if not data:
                continue
            # SDK returns raw bytes; older payloads may already be base64 text
            encoded = base64.b64encode(data).decode("ascii") if isinstance(data, bytes) else str(data)
            mime_type = getattr(inline, "mime_type", None) or DEFAULT_IMAGE_MIME
            logger.info("image_generated", business_name=business_name, size=size.value)
            return GeneratedImage(
                data_uri=f"data:{mime_type};base64,{encoded}",
                mime_type=mime_type,
                size=size,
            )

        raise NoImageGeneratedError("image", "No image generated")

    # -------------------------------------------------------------------------
    # Video
    # -------------------------------------------------------------------------

    async def generate_explanation_video(
        self,
        business_name: str,
        summary: str,
        ratio: AspectRatio = AspectRatio.LANDSCAPE,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> GeneratedVideo:
        """Submit the video request, poll until done and download the result.

        Raises:
            VideoGenerationCancelledError: cancel_event was set while polling.
            VideoPollTimeoutError: The operation did not finish in time.
            VideoDownloadError: The finished video could not be fetched.
            VideoGenerationError: Any other failure.
        """
        ratio = AspectRatio(ratio)
        try:
            client, api_key = self._client("video")
        except CredentialExpiredError as e:
            raise VideoGenerationError("video", e.message) from e

        try:
            operation = await client.aio.models.generate_videos(
                model=self._settings.video_model,
                prompt=build_video_prompt(business_name, summary),
                config=types.GenerateVideosConfig(
                    number_of_videos=1,
                    resolution=self._settings.video_resolution,
                    aspect_ratio=ratio.value,
                ),
            )
        except Exception as e:
            raise VideoGenerationError("video", f"Video request failed: {e}") from e

        logger.info("video_submitted", business_name=business_name, aspect_ratio=ratio.value)
        operation = await self.wait_for_operation(client, operation, cancel_event)

        uri = self._video_uri(operation)
        content = await self._download(uri, api_key)
        stored = self.media_store.put(content, DEFAULT_VIDEO_MIME)
        return GeneratedVideo(
            handle=stored.handle,
            url=video_url(stored.handle),
            mime_type=stored.mime_type,
            aspect_ratio=ratio,
        )

    async def wait_for_operation(
        self,
        client: Any,
        operation: Any,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Any:
        """Re-query a long-running operation until it reports done.

        Waits ``video_poll_interval_seconds`` before every re-query and gives up
        after ``video_max_poll_attempts`` re-queries (0 = never give up).
        """
        max_polls = self._settings.video_max_poll_attempts
        poller = AsyncRetrying(
            retry=retry_if_result(lambda op: not getattr(op, "done", False)),
            wait=wait_fixed(self._settings.video_poll_interval_seconds),
            stop=stop_after_attempt(max_polls + 1) if max_polls else stop_never,
            sleep=_cancellable_sleep(cancel_event),
            reraise=True,
        )

        try:
            async for attempt in poller:
                with attempt:
                    if cancel_event is not None and cancel_event.is_set():
                        raise VideoGenerationCancelledError("video", "Polling abandoned")
                    if attempt.retry_state.attempt_number > 1:
                        operation = await client.aio.operations.get(operation)
                        logger.debug(
                            "video_polled",
                            attempt=attempt.retry_state.attempt_number - 1,
                            done=bool(getattr(operation, "done", False)),
                        )
                if not attempt.retry_state.outcome.failed:
                    attempt.retry_state.set_result(operation)
        except ServiceError:
            raise
        except RetryError as e:
            logger.error("video_poll_timeout", polls=max_polls)
            raise VideoPollTimeoutError(
                "video", f"Video not ready after {max_polls} status checks"
            ) from e
        except Exception as e:
            raise VideoGenerationError("video", f"Status check failed: {e}") from e

        logger.info("video_operation_done")
        return operation

    def _video_uri(self, operation: Any) -> str:
        error = getattr(operation, "error", None)
        if error:
            raise VideoGenerationError("video", f"Video operation failed: {error}")
        result = getattr(operation, "response", None) or getattr(operation, "result", None)
        videos = getattr(result, "generated_videos", None) or []
        video = getattr(videos[0], "video", None) if videos else None
        uri = getattr(video, "uri", None)
        if not uri:
            raise VideoGenerationError("video", "Operation finished without a video")
        return uri

    async def _download(self, uri: str, api_key: str) -> bytes:
        try:
            async with self._http_client_factory() as http:
                response = await http.get(uri, params={"key": api_key})
                response.raise_for_status()
                return response.content
        except httpx.HTTPStatusError as e:
            logger.error("video_download_failed", status_code=e.response.status_code)
            raise VideoDownloadError(
                "video",
                f"Download failed with status {e.response.status_code}",
                {"status_code": e.response.status_code},
            ) from e
        except httpx.RequestError as e:
            logger.error("video_download_failed", error=str(e))
            raise VideoDownloadError("video", f"Download failed: {e}") from e
