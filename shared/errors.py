"""
Shared error handling for the Word of the Day service.
"""

from enum import Enum
from typing import Dict, Any, Optional

import httpx
from pydantic import BaseModel

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class ServiceException(Exception):
    """Base exception for Word of the Day services."""

    status_code: int = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationError(ServiceException):
    """Invalid or missing configuration detected at construction time."""

    status_code = 500

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class UpstreamErrorKind(str, Enum):
    """How an upstream failure should be treated by callers."""
    TRANSIENT = "transient"
    PERMANENT = "permanent"
    EMPTY = "empty"
    RETRY_EXHAUSTED = "retry_exhausted"


class UpstreamError(ServiceException):
    """Failure talking to an upstream provider."""

    status_code = 502
    kind = UpstreamErrorKind.PERMANENT

    def __init__(self, service: str, message: str = "Upstream error",
                 status_code: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.service = service
        self.upstream_status = status_code
        details = dict(details or {})
        if status_code is not None:
            details.setdefault("status_code", status_code)
        super().__init__("UPSTREAM_ERROR", f"{service}: {message}", details)

    @property
    def retryable(self) -> bool:
        return self.kind == UpstreamErrorKind.TRANSIENT


class TransientUpstreamError(UpstreamError):
    """Retryable failure: 5xx, connect/read timeout, I/O error."""

    kind = UpstreamErrorKind.TRANSIENT


class PermanentUpstreamError(UpstreamError):
    """Non-retryable failure: 4xx or malformed payload."""

    kind = UpstreamErrorKind.PERMANENT


class EmptyResponseError(UpstreamError):
    """Upstream answered successfully but with no usable data."""

    kind = UpstreamErrorKind.EMPTY


class RetryExhaustedError(UpstreamError):
    """Raised when every retry attempt failed with a retryable error."""

    kind = UpstreamErrorKind.RETRY_EXHAUSTED

    def __init__(self, operation: str, last_exception: Exception, attempts: int):
        self.last_exception = last_exception
        self.attempts = attempts
        super().__init__(
            operation,
            f"failed after {attempts} attempts: {last_exception}",
            status_code=getattr(last_exception, "upstream_status", None),
            details={"attempts": attempts, "last_error": type(last_exception).__name__},
        )


def classify_status(service: str, status_code: int, body: str = "") -> UpstreamError:
    """Map a non-success HTTP status to the matching upstream error."""
    details = {"body": body[:500]} if body else {}
    if 500 <= status_code < 600:
        return TransientUpstreamError(service, f"Unexpected status {status_code}",
                                      status_code=status_code, details=details)
    return PermanentUpstreamError(service, f"Unexpected status {status_code}",
                                  status_code=status_code, details=details)


def is_retryable(exc: BaseException) -> bool:
    """Decide whether a failed upstream call is worth another attempt."""
    if isinstance(exc, UpstreamError):
        return exc.retryable
    # Connect/read timeouts and network failures
    if isinstance(exc, httpx.TransportError):
        return True
    return isinstance(exc, OSError)
