"""
Session registry - maps browser session cookies to orchestrators.

Each browser session gets its own credential provider, service client and
TurnaroundSession. Nothing is persisted. Sessions idle for longer than
``session_idle_ttl_seconds`` are evicted, and once ``session_max_count``
sessions are live the least recently used one makes room for a new one.
Evicted sessions are closed, which abandons their pending media work.
"""

import time
from collections import OrderedDict
from typing import Awaitable, Callable, Optional
from uuid import uuid4

import structlog

from bizniz.config.settings import Settings, get_settings
from bizniz.core.credentials import ApiKeyCredentialProvider
from bizniz.core.geolocation import (
    GeolocationProvider,
    SettingsGeolocationProvider,
    locate_best_effort,
)
from bizniz.orchestration.session import TurnaroundSession
from bizniz.services.gemini_service import GeminiService
from bizniz.services.media_store import MediaStore

logger = structlog.get_logger(__name__)

SessionFactory = Callable[[], Awaitable[TurnaroundSession]]


class SessionRegistry:
    """In-memory session id -> TurnaroundSession mapping with idle and size bounds."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session_factory: Optional[SessionFactory] = None,
        geolocation_provider: Optional[GeolocationProvider] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._settings = settings or get_settings()
        self._factory = session_factory or self._create_session
        self._geolocation_provider = geolocation_provider or SettingsGeolocationProvider(self._settings)
        self._clock = clock
        # Ordered least to most recently used.
        self._sessions: OrderedDict[str, tuple[TurnaroundSession, float]] = OrderedDict()
        # Shared so every session can serve the videos it downloaded.
        self.media_store = MediaStore()

    @staticmethod
    def new_session_id() -> str:
        return uuid4().hex

    async def _create_session(self) -> TurnaroundSession:
        key = self._settings.gemini_api_key
        credentials = ApiKeyCredentialProvider(key.get_secret_value() if key else None)
        service = GeminiService(credentials, settings=self._settings, media_store=self.media_store)
        geolocation = await locate_best_effort(self._geolocation_provider)
        return TurnaroundSession(service, credentials, settings=self._settings, geolocation=geolocation)

    async def get_or_create(self, session_id: str) -> TurnaroundSession:
        now = self._clock()
        await self._evict_idle(now)

        entry = self._sessions.get(session_id)
        if entry is not None:
            session = entry[0]
            self._sessions[session_id] = (session, now)
            self._sessions.move_to_end(session_id)
            return session

        while len(self._sessions) >= self._settings.session_max_count:
            _, (oldest, _) = self._sessions.popitem(last=False)
            logger.info("session_evicted", reason="capacity", session_count=len(self._sessions))
            await oldest.close()

        session = await self._factory()
        self._sessions[session_id] = (session, now)
        logger.info("session_created", session_count=len(self._sessions))
        return session

    async def _evict_idle(self, now: float) -> None:
        cutoff = now - self._settings.session_idle_ttl_seconds
        expired = [sid for sid, (_, last_seen) in self._sessions.items() if last_seen < cutoff]
        for session_id in expired:
            session, _ = self._sessions.pop(session_id)
            await session.close()
        if expired:
            logger.info("session_evicted", reason="idle", evicted=len(expired), session_count=len(self._sessions))

    def get(self, session_id: str) -> Optional[TurnaroundSession]:
        entry = self._sessions.get(session_id)
        return entry[0] if entry is not None else None

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    async def close(self) -> None:
        """Abandon pending media work in every session."""
        for session, _ in self._sessions.values():
            await session.close()
        logger.info("sessions_closed", session_count=len(self._sessions))
        self._sessions.clear()
