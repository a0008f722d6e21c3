"""
ApiClient - Async HTTP client for the Aaraazi backend API.

Combines:
- Bearer token and request timestamp headers
- Backend error bodies mapped onto structured ServiceErrors
- Optional per-resource CircuitBreaker
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
from loguru import logger

from aaraazi.services.circuit_breaker import (
    CircuitBreakerConfig,
    CircuitBreakerRegistry,
)
from aaraazi.services.errors import (
    ApiError,
    Failure,
    FailureKind,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
    ServiceError,
    UnauthorizedError,
)

# Log label per status code, matching what the dashboard reports to operators.
_STATUS_LABELS = {
    403: "Access forbidden",
    404: "Resource not found",
    422: "Validation error",
    429: "Rate limit exceeded",
    500: "Server error",
    502: "Server error",
    503: "Server error",
    504: "Server error",
}


class ApiClient:
    """
    HTTP client shared by every resource service.

    Usage:
        async with ApiClient("https://api.aaraazi.com", token=token) as client:
            cycles = await client.get("/sell-cycles", service_id="sell-cycles")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        token: str | None = None,
        use_circuit_breaker: bool = False,
        circuit_breaker_config: CircuitBreakerConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        debug: bool = False,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._token = token or None
        self._use_circuit_breaker = use_circuit_breaker
        self._breakers = CircuitBreakerRegistry(circuit_breaker_config)
        self._transport = transport
        self._debug = debug

        # HTTP client (lazy initialization)
        self._http_client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "ApiClient":
        """Build a client from ``aaraazi.settings.Settings``."""
        return cls(
            base_url=settings.api_url,
            timeout=settings.api_timeout,
            token=settings.api_token,
            use_circuit_breaker=settings.circuit_breaker_enabled,
            circuit_breaker_config=CircuitBreakerConfig(
                failure_threshold=settings.circuit_breaker_threshold,
                reset_timeout=timedelta(seconds=settings.circuit_breaker_reset_seconds),
            ),
            debug=settings.debug,
            **kwargs,
        )

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout),
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._http_client

    # Authentication

    def set_auth_token(self, token: str | None) -> None:
        """Set the bearer token for all subsequent requests."""
        self._token = token or None

    def clear_auth_token(self) -> None:
        self._token = None

    @property
    def has_auth_token(self) -> bool:
        return self._token is not None

    def _headers(self) -> dict[str, str]:
        headers = {
            "X-Request-Time": datetime.now(timezone.utc).isoformat(),
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    # Requests

    async def request(
        self,
        method: str,
        path: str,
        service_id: str = "api",
        params: dict[str, Any] | None = None,
        json_data: Any = None,
        timeout: float | None = None,
    ) -> Any:
        """
        Send a request and return the decoded JSON body.

        Args:
            method: HTTP method (GET, POST, ...)
            path: Path relative to the API base URL
            service_id: Resource identifier (for logging and circuit breaker)
            params: Query parameters; ``None`` values are dropped
            json_data: JSON body for POST/PUT/PATCH requests
            timeout: Override request timeout in seconds

        Returns:
            Decoded JSON body, or ``None`` for an empty body

        Raises:
            CircuitOpenError: If the resource's circuit breaker is open
            RequestTimeoutError: If the request times out
            NetworkError: If no response was received
            ServiceError: If the request could not be built (``REQUEST_ERROR``)
            ApiError: If the backend answered with an error status
        """
        breaker = (
            self._breakers.for_resource(service_id) if self._use_circuit_breaker else None
        )
        if breaker is not None:
            breaker.before_request()

        try:
            data = await self._execute_request(
                method=method,
                path=path,
                params=params,
                json_data=json_data,
                timeout=timeout or self._timeout,
                service_id=service_id,
            )
        except ServiceError as e:
            if breaker is not None:
                breaker.after_response(e.failure)
            raise
        except asyncio.CancelledError:
            if breaker is not None:
                breaker.release()
            raise
        except Exception as e:
            if breaker is not None:
                breaker.after_response(
                    Failure(
                        str(e) or "Request failed",
                        FailureKind.REQUEST,
                        status_code=0,
                        error_code="REQUEST_ERROR",
                    )
                )
            raise

        if breaker is not None:
            breaker.after_response(None)
        return data

    async def _execute_request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None,
        json_data: Any,
        timeout: float,
        service_id: str,
    ) -> Any:
        """Execute the actual HTTP request."""
        client = await self._get_http_client()
        query = {k: v for k, v in (params or {}).items() if v is not None}

        try:
            response = await client.request(
                method=method,
                url=path,
                params=query or None,
                json=json_data,
                headers=self._headers(),
                timeout=timeout,
            )
            response.raise_for_status()

        except httpx.TimeoutException as e:
            logger.error(f"Request error: {method} {path} timed out after {timeout}s")
            raise RequestTimeoutError(service_id, timeout) from e

        except httpx.HTTPStatusError as e:
            raise self._to_api_error(e.response, method, path, service_id) from e

        except httpx.RequestError as e:
            logger.error(f"Network error: {method} {path}: {e}")
            raise NetworkError(service_id, detail=str(e)) from e

        except (httpx.InvalidURL, TypeError, ValueError) as e:
            # Body or URL could not be encoded; nothing reached the network
            logger.error(f"Request error: {method} {path}: {e}")
            raise ServiceError(
                str(e) or "Request failed",
                service_id=service_id,
                kind=FailureKind.REQUEST,
                status_code=0,
                error_code="REQUEST_ERROR",
            ) from e

        if self._debug:
            logger.debug(f"✓ {method} {path} {response.status_code}")

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ServiceError(
                f"Invalid JSON response from {path}",
                service_id=service_id,
                kind=FailureKind.DECODE,
                status_code=response.status_code,
            ) from e

    def _to_api_error(
        self,
        response: httpx.Response,
        method: str,
        path: str,
        service_id: str,
    ) -> ApiError:
        """Map an error response onto the matching ApiError."""
        status = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            body = {}

        message = body.get("message") or "An error occurred"
        if isinstance(message, list):
            # Validation errors arrive as a list of messages
            message = "; ".join(str(m) for m in message)

        logger.error(f"✗ {method} {path} {status}: {message}")
        label = _STATUS_LABELS.get(status)
        if label:
            logger.error(f"{label}: {message}")

        details = {
            "service_id": service_id,
            "error_code": body.get("error"),
            "timestamp": body.get("timestamp"),
            "path": body.get("path"),
        }

        if status == 401:
            self.clear_auth_token()
            return UnauthorizedError(str(message), status, **details)

        if status == 429:
            return RateLimitError(
                str(message),
                retry_after=_parse_retry_after(response.headers.get("Retry-After")),
                **details,
            )

        return ApiError(str(message), status, **details)

    # Convenience wrappers

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, json_data: Any = None, **kwargs) -> Any:
        return await self.request("POST", path, json_data=json_data, **kwargs)

    async def put(self, path: str, json_data: Any = None, **kwargs) -> Any:
        return await self.request("PUT", path, json_data=json_data, **kwargs)

    async def patch(self, path: str, json_data: Any = None, **kwargs) -> Any:
        return await self.request("PATCH", path, json_data=json_data, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def close(self) -> None:
        """Close the HTTP client and cleanup resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug("ApiClient closed")

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # Health and status methods

    def get_health_status(self) -> dict[str, Any]:
        return {
            "base_url": self._base_url,
            "authenticated": self.has_auth_token,
            "circuit_breakers": self._breakers.statuses(),
            "open_circuits": self._breakers.open_resources(),
        }

    def reset_circuit(self, service_id: str) -> bool:
        return self._breakers.reset(service_id)


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None
