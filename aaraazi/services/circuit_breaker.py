"""
CircuitBreaker - Stops calling a backend resource that keeps failing.

States:
- CLOSED: requests pass through
- OPEN: requests are rejected with CircuitOpenError, no network call
- HALF_OPEN: a limited number of trial requests test recovery

Transport failures, timeouts, 5xx answers and requests that could not be
sent trip the breaker. A 4xx answer means the backend is up and refused this
particular request. A trial request cancelled before its answer gives its slot back.
"""

from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from loguru import logger

from aaraazi.services.errors import CircuitOpenError, Failure, FailureKind


class CircuitState(str, Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


@dataclass
class CircuitBreakerConfig:
    failure_threshold: int = 3  # consecutive tripping failures
    reset_timeout: timedelta = timedelta(seconds=30)  # OPEN -> HALF_OPEN
    half_open_max_requests: int = 1


@dataclass(frozen=True)
class BreakerStatus:
    resource: str
    state: CircuitState
    consecutive_failures: int
    last_failure: str | None
    seconds_until_trial: float | None

    def to_dict(self) -> dict[str, Any]:
        status = asdict(self)
        status["state"] = self.state.value
        return status


def trips_breaker(failure: Failure) -> bool:
    if failure.kind in (
        FailureKind.TRANSPORT,
        FailureKind.TIMEOUT,
        FailureKind.REQUEST,
    ):
        return True
    return failure.kind == FailureKind.HTTP and (failure.status_code or 0) >= 500


class CircuitBreaker:
    """
    Breaker for one backend resource ("deals", "sell-cycles", ...).

    Usage:
        breaker = CircuitBreaker("deals")

        breaker.before_request()          # raises CircuitOpenError when open
        try:
            body = await send()
        except ServiceError as e:
            breaker.after_response(e.failure)
            raise
        breaker.after_response(None)

        # cancelled before the answer arrived
        breaker.release()
    """

    def __init__(
        self,
        resource: str,
        config: CircuitBreakerConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.resource = resource
        self.config = config or CircuitBreakerConfig()
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._last_failure: Failure | None = None
        self._opened_at: datetime | None = None
        self._trials = 0

    @property
    def state(self) -> CircuitState:
        if (
            self._state == CircuitState.OPEN
            and self._opened_at is not None
            and self._clock() >= self._opened_at + self.config.reset_timeout
        ):
            self._state = CircuitState.HALF_OPEN
            self._trials = 0
            logger.info(f"Circuit for '{self.resource}' half-open, probing")
        return self._state

    def before_request(self) -> None:
        """Admit one request or raise ``CircuitOpenError``."""
        state = self.state
        if state == CircuitState.CLOSED:
            return
        if (
            state == CircuitState.HALF_OPEN
            and self._trials < self.config.half_open_max_requests
        ):
            self._trials += 1
            return
        raise CircuitOpenError(self.resource, self.seconds_until_trial() or 0.0)

    def after_response(self, failure: Failure | None) -> None:
        """Feed back the outcome of an admitted request (``None`` on success)."""
        if failure is None or not trips_breaker(failure):
            if self._state == CircuitState.HALF_OPEN:
                logger.info(f"Circuit for '{self.resource}' closed, resource recovered")
            self._close()
            return

        self._consecutive_failures += 1
        self._last_failure = failure
        if (
            self._state == CircuitState.HALF_OPEN
            or self._consecutive_failures >= self.config.failure_threshold
        ):
            self._open()

    def release(self) -> None:
        """Return the slot of an admitted request that ended without an outcome."""
        if self._state == CircuitState.HALF_OPEN and self._trials > 0:
            self._trials -= 1

    def reset(self) -> None:
        self._close()
        self._last_failure = None

    def seconds_until_trial(self) -> float | None:
        if self._state != CircuitState.OPEN or self._opened_at is None:
            return None
        trial_at = self._opened_at + self.config.reset_timeout
        return max(0.0, (trial_at - self._clock()).total_seconds())

    def status(self) -> BreakerStatus:
        return BreakerStatus(
            resource=self.resource,
            state=self.state,
            consecutive_failures=self._consecutive_failures,
            last_failure=self._last_failure.reason if self._last_failure else None,
            seconds_until_trial=self.seconds_until_trial(),
        )

    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = self._clock()
        logger.warning(
            f"Circuit for '{self.resource}' opened after "
            f"{self._consecutive_failures} failures: {self._last_failure.reason}"
        )

    def _close(self) -> None:
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._opened_at = None
        self._trials = 0


class CircuitBreakerRegistry:
    """One breaker per backend resource, created on first request."""

    def __init__(
        self,
        config: CircuitBreakerConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._config = config or CircuitBreakerConfig()
        self._clock = clock
        self._breakers: dict[str, CircuitBreaker] = {}

    def for_resource(self, resource: str) -> CircuitBreaker:
        breaker = self._breakers.get(resource)
        if breaker is None:
            breaker = CircuitBreaker(resource, self._config, clock=self._clock)
            self._breakers[resource] = breaker
        return breaker

    def statuses(self) -> dict[str, dict[str, Any]]:
        return {name: b.status().to_dict() for name, b in self._breakers.items()}

    def open_resources(self) -> list[str]:
        return [
            name for name, b in self._breakers.items() if b.state == CircuitState.OPEN
        ]

    def reset(self, resource: str) -> bool:
        breaker = self._breakers.get(resource)
        if breaker is None:
            return False
        breaker.reset()
        return True
