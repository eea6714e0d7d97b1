"""Error taxonomy rendered to clients as ``{"error": message}`` bodies."""
from __future__ import annotations

from typing import Optional


class StudioError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(StudioError):
    """Raised when a request body fails validation."""

    status_code = 400


class RateLimitExceeded(StudioError):
    """Raised when a client exhausts its quota for the current window."""

    status_code = 429

    def __init__(self, retry_after: Optional[int] = None) -> None:
        super().__init__("Too many requests. Please try again later.")
        self.retry_after = retry_after


class ConfigurationError(StudioError):
    """Raised when upstream credentials are missing."""

    status_code = 503

    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(message)


class UpstreamError(StudioError):
    """Raised when the AI gateway fails; the message is safe to show users."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.status_code = status_code


class UnexpectedError(StudioError):
    """Raised for failures nobody anticipated."""
