"""
RequestDeduplicator - Shares one in-flight request between concurrent callers.

When several coroutines ask for the same cache key while a request for it is
still pending, only the first one reaches the backend; the others await the
same task and receive its result or its exception.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from loguru import logger

T = TypeVar("T")


@dataclass
class DeduplicatorStats:
    """Statistics for request deduplication."""

    total: int = 0  # Requests that reached the backend
    deduplicated: int = 0  # Callers that joined an in-flight request
    in_flight: int = 0

    @property
    def dedup_rate(self) -> float:
        total = self.total + self.deduplicated
        if total == 0:
            return 0.0
        return self.deduplicated / total

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_requests": self.total,
            "deduplicated": self.deduplicated,
            "in_flight": self.in_flight,
            "dedup_rate": f"{self.dedup_rate:.2%}",
        }


class RequestDeduplicator:
    """
    Deduplicates concurrent async requests by key.

    Usage:
        dedup = RequestDeduplicator()

        deals = await dedup.dedupe("deals:unfiltered", lambda: service.find_all())
    """

    def __init__(self, debug: bool = False):
        self._in_flight: dict[str, asyncio.Task[Any]] = {}
        self._debug = debug
        self._stats = DeduplicatorStats()

    async def dedupe(self, key: str, request_fn: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``request_fn`` unless a request for ``key`` is already pending.

        Cancelling one waiter does not cancel the shared request.
        """
        task = self._in_flight.get(key)
        if task is None:
            self._stats.total += 1
            self._log(f"NEW: {key[:50]}")
            task = asyncio.ensure_future(request_fn())
            self._in_flight[key] = task
            task.add_done_callback(lambda done, key=key: self._on_done(key, done))
        else:
            self._stats.deduplicated += 1
            self._log(f"JOIN: {key[:50]}")

        return await asyncio.shield(task)

    def _on_done(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if not task.cancelled():
            # Mark the exception as retrieved when every waiter was cancelled.
            task.exception()
        self._log(f"DONE: {key[:50]}")

    def forget(self, key: str) -> bool:
        """
        Stop sharing the pending request for ``key``.

        Callers already waiting on it still get its result; the next caller
        starts a new request.
        """
        task = self._in_flight.pop(key, None)
        if task is None:
            return False
        self._log(f"FORGET: {key[:50]}")
        return True

    def get_in_flight_keys(self) -> list[str]:
        return list(self._in_flight.keys())

    def get_stats(self) -> DeduplicatorStats:
        self._stats.in_flight = len(self._in_flight)
        return self._stats

    def _log(self, message: str) -> None:
        if self._debug:
            logger.debug(f"[Deduplicator] {message}")
