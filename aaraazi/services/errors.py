"""
Service layer exceptions.

Every exception raised at the HTTP boundary carries a ``Failure`` so callers
never have to introspect unknown error shapes.
"""

from dataclasses import dataclass
from enum import Enum


class FailureKind(str, Enum):
    """Where a failure originated."""

    TRANSPORT = "TRANSPORT"  # no response received
    TIMEOUT = "TIMEOUT"
    HTTP = "HTTP"  # backend answered with a non-2xx status
    CIRCUIT_OPEN = "CIRCUIT_OPEN"
    DECODE = "DECODE"  # body could not be parsed or validated
    REQUEST = "REQUEST"  # request could not be built or sent
    UNSUPPORTED = "UNSUPPORTED"


@dataclass(frozen=True)
class Failure:
    """Structured description of a failed request."""

    reason: str
    kind: FailureKind
    status_code: int | None = None
    error_code: str | None = None


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(
        self,
        message: str,
        service_id: str | None = None,
        *,
        kind: FailureKind = FailureKind.TRANSPORT,
        status_code: int | None = None,
        error_code: str | None = None,
    ):
        self.service_id = service_id
        self.failure = Failure(
            reason=message,
            kind=kind,
            status_code=status_code,
            error_code=error_code,
        )
        super().__init__(message)

    @property
    def message(self) -> str:
        return self.failure.reason

    @property
    def status_code(self) -> int | None:
        return self.failure.status_code


class ApiError(ServiceError):
    """The backend rejected the request."""

    def __init__(
        self,
        message: str,
        status_code: int,
        service_id: str | None = None,
        error_code: str | None = None,
        timestamp: str | None = None,
        path: str | None = None,
    ):
        self.timestamp = timestamp
        self.path = path
        super().__init__(
            message,
            service_id=service_id,
            kind=FailureKind.HTTP,
            status_code=status_code,
            error_code=error_code,
        )


class UnauthorizedError(ApiError):
    """Credentials were missing or rejected (HTTP 401)."""

    pass


class RateLimitError(ApiError):
    """Rate limit exceeded (HTTP 429)."""

    def __init__(
        self,
        message: str,
        service_id: str | None = None,
        retry_after: float | None = None,
        **kwargs,
    ):
        self.retry_after = retry_after
        if retry_after:
            message += f", retry after {retry_after}s"
        super().__init__(message, 429, service_id=service_id, **kwargs)


class NetworkError(ServiceError):
    """No response was received from the backend."""

    def __init__(self, service_id: str | None = None, detail: str | None = None):
        self.detail = detail
        super().__init__(
            "Network error. Please check your connection.",
            service_id=service_id,
            kind=FailureKind.TRANSPORT,
            status_code=0,
            error_code="NETWORK_ERROR",
        )


class RequestTimeoutError(ServiceError):
    """Request timed out."""

    def __init__(self, service_id: str, timeout: float):
        self.timeout = timeout
        super().__init__(
            "Network error. Please check your connection.",
            service_id=service_id,
            kind=FailureKind.TIMEOUT,
            status_code=0,
            error_code="TIMEOUT",
        )


class CircuitOpenError(ServiceError):
    """Circuit breaker is open, request blocked."""

    def __init__(self, service_id: str, reset_after_seconds: float):
        self.reset_after_seconds = reset_after_seconds
        super().__init__(
            f"Circuit breaker open for service '{service_id}', "
            f"retry after {reset_after_seconds:.1f}s",
            service_id=service_id,
            kind=FailureKind.CIRCUIT_OPEN,
        )


class UnsupportedOperationError(ServiceError):
    """The resource does not offer the requested operation."""

    def __init__(self, service_id: str, operation: str):
        self.operation = operation
        super().__init__(
            f"Resource '{service_id}' does not support {operation}",
            service_id=service_id,
            kind=FailureKind.UNSUPPORTED,
        )


def failure_reason(error: BaseException, fallback: str) -> str:
    """Human-readable reason for ``error``, or ``fallback`` if it has none."""
    if isinstance(error, ServiceError) and error.failure.reason:
        return error.failure.reason
    return fallback
