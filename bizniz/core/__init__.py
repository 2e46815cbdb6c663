"""
Core infrastructure modules for Biz-Niz Pro.

Provides common utilities used across the application:
- exceptions: Standardized exception hierarchy
- credentials: Injected API key capability
- geolocation: Best-effort coordinate providers
"""

from bizniz.core.exceptions import (
    BizNizError,
    ServiceError,
    CredentialExpiredError,
    DiscoveryError,
    AnalysisError,
    ImageGenerationError,
    NoImageGeneratedError,
    VideoGenerationError,
    VideoPollTimeoutError,
    VideoGenerationCancelledError,
    VideoDownloadError,
    SessionError,
    OperationInProgressError,
    UnknownBusinessError,
    NoActiveReportError,
)

from bizniz.core.credentials import ApiKeyCredentialProvider, CredentialProvider
from bizniz.core.geolocation import (
    GeolocationProvider,
    SettingsGeolocationProvider,
    locate_best_effort,
)

__all__ = [
    # Exceptions
    "BizNizError",
    "ServiceError",
    "CredentialExpiredError",
    "DiscoveryError",
    "AnalysisError",
    "ImageGenerationError",
    "NoImageGeneratedError",
    "VideoGenerationError",
    "VideoPollTimeoutError",
    "VideoGenerationCancelledError",
    "VideoDownloadError",
    "SessionError",
    "OperationInProgressError",
    "UnknownBusinessError",
    "NoActiveReportError",
    # Credentials
    "CredentialProvider",
    "ApiKeyCredentialProvider",
    # Geolocation
    "GeolocationProvider",
    "SettingsGeolocationProvider",
    "locate_best_effort",
]
