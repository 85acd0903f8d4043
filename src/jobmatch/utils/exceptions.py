"""
Custom exception classes for the JobMatch engine.

Every failure raised by the stores, the embedding provider and the
generative client is one of the kinds below, so callers can tell a
missing configuration from a network problem or a bad payload.
"""

from typing import Any, Optional


class JobMatchError(Exception):
    """Base exception for the JobMatch engine."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/response."""
        result = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class ProviderUnavailableError(JobMatchError):
    """Raised when an embedding or generative service is not configured."""

    def __init__(self, message: str, provider: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if provider:
            details["provider"] = provider
        super().__init__(message, error_code="PROVIDER_UNAVAILABLE", details=details, **kwargs)


class NetworkError(JobMatchError):
    """Raised when a remote call fails or returns a non-success status."""

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        status: Optional[int] = None,
        error_code: str = "NETWORK_FAILURE",
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if service:
            details["service"] = service
        if status is not None:
            details["status"] = status
        self.status = status
        super().__init__(message, error_code=error_code, details=details, **kwargs)


class RequestTimeoutError(NetworkError):
    """Raised when a remote call or embedding request exceeds its timeout."""

    def __init__(self, message: str, timeout: Optional[float] = None, **kwargs):
        details = kwargs.pop("details", {})
        if timeout is not None:
            details["timeout"] = timeout
        super().__init__(message, error_code="TIMEOUT", details=details, **kwargs)


class MalformedResponseError(JobMatchError):
    """Raised when a remote service answers with an unexpected shape."""

    def __init__(self, message: str, service: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if service:
            details["service"] = service
        super().__init__(message, error_code="MALFORMED_RESPONSE", details=details, **kwargs)


class InputValidationError(JobMatchError):
    """Raised when a caller supplies an empty query or a malformed document."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None, **kwargs):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["invalid_value"] = str(value)
        super().__init__(message, error_code="VALIDATION_ERROR", details=details, **kwargs)
