"""
Core exception hierarchy for Biz-Niz Pro.

Service errors are raised by the Gemini service client and converted to
session state by the orchestrator. Session errors are raised by the
orchestrator for invalid user actions and mapped to HTTP responses.
"""

from typing import Any, Optional


# =============================================================================
# Base Exceptions
# =============================================================================


class BizNizError(Exception):
    """Base exception for all Biz-Niz Pro errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# Service Errors
# =============================================================================


class ServiceError(BizNizError):
    """Base exception for failed calls against the hosted model."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        self.operation = operation
        super().__init__(f"[{operation}] {message}", details)


class CredentialExpiredError(ServiceError):
    """The API key is missing or the service no longer accepts it."""

    pass


class DiscoveryError(ServiceError):
    """Raised when the business discovery call fails."""

    pass


class AnalysisError(ServiceError):
    """Raised when the turnaround analysis call fails."""

    pass


class ImageGenerationError(ServiceError):
    """Raised when the image synthesis call fails."""

    pass


class NoImageGeneratedError(ImageGenerationError):
    """The image call succeeded but returned no image part."""

    pass


class VideoGenerationError(ServiceError):
    """Raised when the video synthesis call fails."""

    pass


class VideoPollTimeoutError(VideoGenerationError):
    """The video operation did not finish within the allowed status checks."""

    pass


class VideoGenerationCancelledError(VideoGenerationError):
    """Polling was abandoned because the user navigated away."""

    pass


class VideoDownloadError(VideoGenerationError):
    """The finished video could not be downloaded."""

    pass


# =============================================================================
# Session Errors
# =============================================================================


class SessionError(BizNizError):
    """Base exception for invalid actions against a session."""

    pass


class OperationInProgressError(SessionError):
    """The requested action is already running."""

    pass


class UnknownBusinessError(SessionError):
    """The business id is not part of the current search results."""

    def __init__(self, business_id: str):
        self.business_id = business_id
        super().__init__(f"Business {business_id} not found in current results")


class NoActiveReportError(SessionError):
    """The action needs an analysis report but none is active."""

    pass
