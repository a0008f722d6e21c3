"""
KeyedStore - shared plumbing for every store that owns cache entries.

A store owns one or more ``EntryMap``s, notifies subscribers after each
write, and tracks the fire-and-forget fetches it schedules so they can be
awaited at shutdown.
"""

import asyncio
from collections.abc import Awaitable, Callable, Coroutine, Iterable
from typing import Any, TypeVar

from loguru import logger

from aaraazi.cache.entries import CacheEntry, CacheEvent, EntryMap, Listener
from aaraazi.services.deduplicator import RequestDeduplicator
from aaraazi.services.errors import ServiceError, failure_reason

T = TypeVar("T")


class KeyedStore:
    """Base class for stores built from keyed tri-state entries."""

    def __init__(self, name: str, coalesce: bool = False, debug: bool = False):
        self.name = name
        self._debug = debug
        self._listeners: list[Listener] = []
        self._background: set[asyncio.Task[Any]] = set()
        self._dedup = RequestDeduplicator(debug=debug) if coalesce else None
        self._maps: dict[str, EntryMap[Any]] = {}

    def _entry_map(self, section: str, empty: Callable[[], T]) -> EntryMap[T]:
        entries = EntryMap(section, empty=empty, notify=self._emit, debug=self._debug)
        self._maps[section] = entries
        return entries

    def snapshot(self) -> dict[str, Any]:
        return {
            section: {k: e.to_dict() for k, e in entries.snapshot().items()}
            for section, entries in self._maps.items()
        }

    # Subscriptions

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every write. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, section: str, key: str, entry: CacheEntry[Any] | None) -> None:
        event = CacheEvent(store=self.name, section=section, key=key, entry=entry)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"[{self.name}] subscriber failed on {section}[{key}]")

    # Fetch protocol

    async def _settle(
        self,
        entries: EntryMap[T],
        key: str,
        load: Callable[[], Awaitable[T]],
        fallback: str,
    ) -> CacheEntry[T]:
        """
        Await ``load`` and write the terminal state for ``key``.

        The caller must already have marked the key as loading. Failures are
        absorbed into the entry and never re-raised.
        """
        try:
            if self._dedup is not None:
                data = await self._dedup.dedupe(f"{entries.section}:{key}", load)
            else:
                data = await load()
        except Exception as e:
            reason = failure_reason(e, fallback)
            if isinstance(e, ServiceError):
                logger.warning(f"[{self.name}] {entries.section}[{key}] failed: {reason}")
            else:
                logger.opt(exception=e).warning(
                    f"[{self.name}] {entries.section}[{key}] failed unexpectedly"
                )
            return entries.fail(key, reason)
        return entries.succeed(key, data)

    def _forget_requests(self, section: str, keys: Iterable[str] | None = None) -> None:
        """Make the next fetch of these keys (all of ``section`` by default) start fresh."""
        if self._dedup is None:
            return
        prefix = f"{section}:"
        wanted = None if keys is None else {prefix + key for key in keys}
        for in_flight in self._dedup.get_in_flight_keys():
            if in_flight.startswith(prefix) and (wanted is None or in_flight in wanted):
                self._dedup.forget(in_flight)

    # Background tasks

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    @property
    def pending_tasks(self) -> int:
        return len(self._background)

    def get_stats(self) -> dict[str, Any]:
        return {
            "entries": {section: len(entries) for section, entries in self._maps.items()},
            "pending_tasks": self.pending_tasks,
            "deduplicator": self._dedup.get_stats().to_dict() if self._dedup else None,
        }

    async def drain(self) -> None:
        """Wait for every scheduled background fetch to settle."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def _log(self, message: str) -> None:
        if self._debug:
            logger.debug(f"[{self.name}] {message}")
