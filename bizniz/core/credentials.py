"""API key credential capability.

The service client never reads the key from ambient globals. It asks an
injected provider for the key on every call, and the orchestrator revokes
the grant when the service reports an expired session so the UI can ask
for a new key.
"""

from abc import ABC, abstractmethod
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


class CredentialProvider(ABC):
    """Check-granted / request-grant capability for the Gemini API key."""

    @abstractmethod
    def is_granted(self) -> bool:
        """Return True if a usable key is currently granted."""

    @abstractmethod
    def request_grant(self, api_key: Optional[str] = None) -> bool:
        """Grant a key (or re-grant the current one). Returns the new state."""

    @abstractmethod
    def revoke(self) -> None:
        """Mark the current grant as no longer valid."""

    @abstractmethod
    def api_key(self) -> Optional[str]:
        """Return the granted key, or None if not granted."""


class ApiKeyCredentialProvider(CredentialProvider):
    """Holds one API key, seeded from settings or granted from the UI."""

    def __init__(self, api_key: Optional[str] = None):
        self._api_key = (api_key or "").strip() or None
        self._granted = self._api_key is not None

    def is_granted(self) -> bool:
        return self._granted and self._api_key is not None

    def request_grant(self, api_key: Optional[str] = None) -> bool:
        key = (api_key or "").strip()
        if key:
            self._api_key = key
        self._granted = self._api_key is not None
        logger.info("credentials_granted" if self._granted else "credentials_grant_failed")
        return self._granted

    def revoke(self) -> None:
        self._granted = False
        logger.warning("credentials_revoked")

    def api_key(self) -> Optional[str]:
        return self._api_key if self.is_granted() else None
