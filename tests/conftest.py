"""
Pytest Configuration and Shared Fixtures.

This module provides common fixtures for all tests:

- test_settings: Settings with polling waits disabled and no .env lookup
- fake_client: Stand-in for ``genai.Client`` exposing ``client.aio``
- service / session: GeminiService and TurnaroundSession wired to the fake client
- sample_business / sample_report: Domain entities
"""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest

from bizniz.config.settings import Settings
from bizniz.core.credentials import ApiKeyCredentialProvider
from bizniz.models.schemas import AnalysisReport, Business, GroundingSource
from bizniz.orchestration.session import TurnaroundSession
from bizniz.services.gemini_service import GeminiService
from bizniz.services.media_store import MediaStore

TEST_API_KEY = "test-key"
VIDEO_URI = "https://generativelanguage.example/files/video-1:download"
VIDEO_BYTES = b"\x00\x00\x00\x18ftypmp42fake-video"


# =============================================================================
# Fake genai responses
# =============================================================================


def text_response(text: str, chunks: list | None = None) -> SimpleNamespace:
    """A generate_content response with free text and optional grounding chunks."""
    metadata = SimpleNamespace(grounding_chunks=chunks or [])
    candidate = SimpleNamespace(grounding_metadata=metadata, content=SimpleNamespace(parts=[]))
    return SimpleNamespace(text=text, candidates=[candidate], parts=None)


def json_response(payload: dict) -> SimpleNamespace:
    return text_response(json.dumps(payload))


def maps_chunk(title: str, uri: str) -> SimpleNamespace:
    return SimpleNamespace(maps=SimpleNamespace(title=title, uri=uri), web=None)


def web_chunk(title: str, uri: str) -> SimpleNamespace:
    return SimpleNamespace(maps=None, web=SimpleNamespace(title=title, uri=uri))


def image_response(data: bytes | None, mime_type: str = "image/png") -> SimpleNamespace:
    parts = [SimpleNamespace(inline_data=None, text="Here is your concept.")]
    if data is not None:
        parts.append(SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type)))
    return SimpleNamespace(text=None, candidates=[], parts=parts)


def video_operation(done: bool, uri: str | None = VIDEO_URI, error=None) -> SimpleNamespace:
    videos = [SimpleNamespace(video=SimpleNamespace(uri=uri))] if uri else []
    return SimpleNamespace(
        done=done,
        error=error,
        response=SimpleNamespace(generated_videos=videos) if done else None,
    )


class FakeGenaiClient:
    """Mimics the ``client.aio.models`` / ``client.aio.operations`` surface."""

    def __init__(self):
        self.models = SimpleNamespace(
            generate_content=AsyncMock(),
            generate_videos=AsyncMock(),
        )
        self.operations = SimpleNamespace(get=AsyncMock())
        self.aio = SimpleNamespace(models=self.models, operations=self.operations)
        self.api_keys: list[str] = []

    def factory(self, api_key: str) -> "FakeGenaiClient":
        self.api_keys.append(api_key)
        return self


def video_transport(status_code: int = 200, content: bytes = VIDEO_BYTES) -> httpx.MockTransport:
    """Serves the finished video and records the requests it saw."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, content=content)

    transport = httpx.MockTransport(handler)
    transport.requests = requests
    return transport


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings with a key, zero poll interval and a small poll bound."""
    return Settings(
        _env_file=None,
        gemini_api_key=TEST_API_KEY,
        video_poll_interval_seconds=0.0,
        video_max_poll_attempts=3,
        video_status_offsets_seconds=(15.0, 35.0),
    )


@pytest.fixture
def fake_client() -> FakeGenaiClient:
    return FakeGenaiClient()


@pytest.fixture
def credentials() -> ApiKeyCredentialProvider:
    return ApiKeyCredentialProvider(TEST_API_KEY)


@pytest.fixture
def transport() -> httpx.MockTransport:
    return video_transport()


@pytest.fixture
def service(test_settings, credentials, fake_client, transport) -> GeminiService:
    return GeminiService(
        credentials,
        settings=test_settings,
        media_store=MediaStore(),
        client_factory=fake_client.factory,
        http_client_factory=lambda: httpx.AsyncClient(transport=transport),
    )


@pytest.fixture
def session(service, credentials, test_settings) -> TurnaroundSession:
    return TurnaroundSession(service, credentials, settings=test_settings)


@pytest.fixture
def sample_business() -> Business:
    """Return a sample business for testing."""
    return Business(
        id="biz-0",
        name="Sakura Sushi House",
        location="12 Evergreen Terrace, Springfield",
        rating=2.9,
        complaints=["Slow service", "Warm sashimi", "Rude staff"],
        sources=[GroundingSource(title="Sakura Sushi House", uri="https://maps.google.com/?cid=1")],
    )


@pytest.fixture
def sample_report_payload() -> dict:
    """Report JSON as the analysis model emits it."""
    return {
        "summary": "Service speed and fish quality drive most negative reviews.",
        "recurring_themes": ["Slow service", "Food temperature"],
        "competitor_analysis": [
            {"name": "Moe's Maki", "strengths": ["Fast"], "weaknesses": ["Small menu"]},
        ],
        "recommendations": ["Add a second sushi chef at peak hours"],
        "pain_points": [
            {"area": "Service", "description": "Waits over 40 minutes", "severity": "High"},
        ],
        "improvement_steps": [
            {"step": "Cold-chain audit", "impact": "Food safety", "timeline": "2 weeks"},
        ],
        "customer_sentiment": [
            {"category": "Food", "score": 40},
            {"category": "Service", "score": 20},
            {"category": "Value", "score": 55},
        ],
        "competitor_benchmark": "Competitors average 4.3 stars.",
    }


@pytest.fixture
def sample_report(sample_report_payload) -> AnalysisReport:
    return AnalysisReport.model_validate(sample_report_payload)


@pytest.fixture
def discovery_payload() -> dict:
    return {
        "businesses": [
            {
                "name": "Sakura Sushi House",
                "location": "Springfield",
                "rating": 2.9,
                "complaints": ["Slow service", "Warm sashimi", "Rude staff"],
            },
            {
                "name": "Krusty Rolls",
                "location": "Springfield",
                "rating": 3.1,
                "complaints": [],
            },
        ]
    }
