"""Integration test configuration.

Routes are exercised through FastAPI's TestClient against a registry whose
sessions talk to a stubbed service, so no request leaves the process.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from bizniz.api.dependencies import reset_dependencies, set_registry
from bizniz.api.main import app
from bizniz.core.credentials import ApiKeyCredentialProvider
from bizniz.models.schemas import DiscoveryResult, GeneratedImage
from bizniz.orchestration.registry import SessionRegistry
from bizniz.orchestration.session import TurnaroundSession
from bizniz.services.media_store import MediaStore


@pytest.fixture
def stub_service(sample_business, sample_report):
    """Service double shared by every session the registry creates."""
    service = AsyncMock()
    service.media_store = MediaStore()
    service.find_businesses.return_value = DiscoveryResult(
        businesses=[sample_business], sources=sample_business.sources
    )
    service.analyze_business.return_value = sample_report
    service.generate_visual_report.return_value = GeneratedImage(data_uri="data:image/png;base64,AAAA")
    return service


@pytest.fixture
def registry(test_settings, stub_service) -> SessionRegistry:
    async def factory() -> TurnaroundSession:
        credentials = ApiKeyCredentialProvider("test-key")
        return TurnaroundSession(stub_service, credentials, settings=test_settings)

    return SessionRegistry(settings=test_settings, session_factory=factory)


@pytest.fixture
def client(registry):
    """TestClient with the lifespan running, so background media tasks survive between requests."""
    set_registry(registry)
    with TestClient(app) as test_client:
        yield test_client
    reset_dependencies()
