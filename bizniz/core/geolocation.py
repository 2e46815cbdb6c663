"""Best-effort geolocation used to bias discovery results."""

from abc import ABC, abstractmethod
from typing import Optional

import structlog

from bizniz.config.settings import Settings, get_settings
from bizniz.models.schemas import GeoPoint

logger = structlog.get_logger(__name__)


class GeolocationProvider(ABC):
    """One-shot coordinate lookup. Absence must never block anything."""

    @abstractmethod
    async def locate(self) -> Optional[GeoPoint]:
        """Return coordinates, or None if unknown."""


class SettingsGeolocationProvider(GeolocationProvider):
    """Returns the configured default coordinates when both are set."""

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or get_settings()

    async def locate(self) -> Optional[GeoPoint]:
        lat = self._settings.default_latitude
        lng = self._settings.default_longitude
        if lat is None or lng is None:
            return None
        return GeoPoint(latitude=lat, longitude=lng)


async def locate_best_effort(provider: Optional[GeolocationProvider]) -> Optional[GeoPoint]:
    """Run a provider, logging and discarding any failure."""
    if provider is None:
        return None
    try:
        return await provider.locate()
    except Exception as e:
        logger.warning("geolocation_unavailable", error=str(e), error_type=type(e).__name__)
        return None
