"""
Service layer infrastructure - HTTP access to the Aaraazi backend API.

Provides:
- ApiClient: Async HTTP client with structured error mapping
- CircuitBreaker: Stops hammering a failing resource
- RequestDeduplicator: Shares in-flight requests between concurrent callers
"""

from aaraazi.services.errors import (
    ApiError,
    CircuitOpenError,
    Failure,
    FailureKind,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
    ServiceError,
    UnauthorizedError,
    UnsupportedOperationError,
    failure_reason,
)
from aaraazi.services.circuit_breaker import (
    BreakerStatus,
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerRegistry,
    CircuitState,
)
from aaraazi.services.deduplicator import RequestDeduplicator
from aaraazi.services.client import ApiClient

__all__ = [
    # Errors
    "ServiceError",
    "ApiError",
    "UnauthorizedError",
    "RateLimitError",
    "NetworkError",
    "RequestTimeoutError",
    "CircuitOpenError",
    "UnsupportedOperationError",
    "Failure",
    "FailureKind",
    "failure_reason",
    # Circuit Breaker
    "BreakerStatus",
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitBreakerRegistry",
    "CircuitState",
    # Deduplicator
    "RequestDeduplicator",
    # Client
    "ApiClient",
]
