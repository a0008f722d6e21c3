"""
Tri-state cache entries and the keyed maps that hold them.

Every write replaces one key's entry with a new immutable snapshot and leaves
the other keys' entry objects untouched.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from loguru import logger

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Last known state of one fetch operation."""

    data: T
    is_loading: bool = False
    error: str | None = None

    @property
    def is_settled(self) -> bool:
        return not self.is_loading

    @property
    def has_data(self) -> bool:
        """True when the entry holds a successful, non-empty payload."""
        return self.error is None and not self.is_loading and bool(self.data)

    def to_dict(self) -> dict[str, Any]:
        return {"data": self.data, "is_loading": self.is_loading, "error": self.error}


@dataclass(frozen=True)
class CacheEvent:
    """Notification sent to subscribers after a write."""

    store: str
    section: str  # 'lists' | 'details' | 'mutation' | store specific
    key: str
    entry: CacheEntry[Any] | None  # None when the key was removed


Listener = Callable[[CacheEvent], None]


class EntryMap(Generic[T]):
    """
    Mapping from encoded key to ``CacheEntry``.

    Usage:
        details = EntryMap("details", empty=lambda: None, notify=store.emit)

        details.begin("deal-42")        # {data: previous or None, loading}
        details.succeed("deal-42", deal)
        details.read("deal-42").data
    """

    def __init__(
        self,
        section: str,
        empty: Callable[[], T],
        notify: Callable[[str, str, CacheEntry[Any] | None], None],
        debug: bool = False,
    ):
        self.section = section
        self._empty = empty
        self._notify = notify
        self._debug = debug
        self._entries: dict[str, CacheEntry[T]] = {}

    def empty_value(self) -> T:
        return self._empty()

    def get(self, key: str) -> CacheEntry[T] | None:
        """Stored entry for ``key``, or ``None`` if it was never written."""
        return self._entries.get(key)

    def read(self, key: str) -> CacheEntry[T]:
        """Stored entry, or the pending default for a key never fetched."""
        entry = self._entries.get(key)
        if entry is None:
            return CacheEntry(data=self._empty(), is_loading=True)
        return entry

    def begin(self, key: str) -> CacheEntry[T]:
        """Mark ``key`` as loading, keeping its previous data and clearing the error."""
        previous = self._entries.get(key)
        data = previous.data if previous is not None else self._empty()
        return self._write(key, CacheEntry(data=data, is_loading=True, error=None))

    def succeed(self, key: str, data: T) -> CacheEntry[T]:
        return self._write(key, CacheEntry(data=data, is_loading=False, error=None))

    def fail(self, key: str, reason: str) -> CacheEntry[T]:
        """Record a failure; stale data is never kept past a known failure."""
        return self._write(
            key, CacheEntry(data=self._empty(), is_loading=False, error=reason)
        )

    def discard(self, key: str) -> bool:
        """Remove ``key`` so its next read goes to the network."""
        if key not in self._entries:
            return False
        del self._entries[key]
        self._log(f"DISCARD: {key}")
        self._notify(self.section, key, None)
        return True

    def clear(self) -> int:
        keys = list(self._entries)
        self._entries.clear()
        for key in keys:
            self._notify(self.section, key, None)
        if keys:
            self._log(f"CLEAR: {len(keys)} entries removed")
        return len(keys)

    def snapshot(self) -> dict[str, CacheEntry[T]]:
        return dict(self._entries)

    def _write(self, key: str, entry: CacheEntry[T]) -> CacheEntry[T]:
        self._entries[key] = entry
        self._log(
            f"SET: {key} (loading={entry.is_loading}, error={entry.error!r})"
        )
        self._notify(self.section, key, entry)
        return entry

    def _log(self, message: str) -> None:
        if self._debug:
            logger.debug(f"[{self.section}] {message}")

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
