"""Service error hierarchy for generation, dispatch and reconciliation.

This module defines the exception hierarchy for service-level errors:
- ServiceError: Base for all service errors
- ConfigurationError: Missing credential or invalid setup, raised before any job runs
- TransientError: Retryable errors (overload, rate limits)
- PermanentError: Non-retryable errors (everything else)
"""

import re


class ServiceError(Exception):
    """Base exception for all service errors."""

    retryable: bool = False


class ConfigurationError(ServiceError):
    """Fatal configuration problem (e.g. GEMINI_API_KEY not set)."""

    pass


class TransientError(ServiceError):
    """Transient error that may succeed on retry.

    Examples:
    - Model overloaded (503 / UNAVAILABLE)
    - Rate limit exceeded (429 / RESOURCE_EXHAUSTED)
    """

    retryable = True


class PermanentError(ServiceError):
    """Permanent error that will not succeed on retry.

    Examples:
    - Invalid request parameters (400)
    - Safety refusals
    - Unexpected SDK failures
    """

    pass


class AuthorizationError(PermanentError):
    """Credential rejected or model not accessible (403, 404, PERMISSION_DENIED).

    Signals the caller that the user should select another API key.
    """

    pass


class EmptyResponseError(PermanentError):
    """Backend answered without a usable artifact (text or nothing instead of media)."""

    pass


class RetriesExhaustedError(PermanentError):
    """Transient errors persisted past the retry budget."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class VideoTimeoutError(PermanentError):
    """Video operation did not finish within the poll budget."""

    pass


class InsufficientResultsError(PermanentError):
    """Fewer artifacts came back than jobs were submitted."""

    pass


class WatermarkError(ServiceError):
    """Watermark logo could not be loaded or composited."""

    pass


AUTH_ERROR_MARKERS = ("permission denied", "permission_denied", "not found")
AUTH_ERROR_STATUS = re.compile(r"\b(403|404)\b")


def is_auth_error(error: BaseException) -> bool:
    """Check whether an error looks like a rejected or unusable credential."""
    if isinstance(error, AuthorizationError):
        return True
    message = str(error).lower()
    return bool(AUTH_ERROR_STATUS.search(message)) or any(
        marker in message for marker in AUTH_ERROR_MARKERS
    )
