"""
ResourceCache - read-through cache for one backend resource.

Two entry shapes per resource:
- lists: keyed by an optional filter parameter (``keys.list_key``)
- details: keyed by entity id

Fetches write ``{is_loading: True, error: None}`` before the network call and
exactly one terminal state after it. Overlapping fetches for the same key are
applied in resolution order (last write wins) unless coalescing is enabled.

Mutations flip ``is_mutating`` around the service call, re-raise failures,
and on success purge the affected detail entry and re-fetch the unfiltered
list instead of patching cached state locally.
"""

from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Generic, Protocol, TypeVar

from aaraazi.cache.base import KeyedStore
from aaraazi.cache.entries import CacheEntry, EntryMap
from aaraazi.cache.keys import (
    UNFILTERED,
    CacheKey,
    FilteredBy,
    FilterParam,
    Unfiltered,
    list_key,
)

ItemT = TypeVar("ItemT")
ListT = TypeVar("ListT")
R = TypeVar("R")


class ResourceService(Protocol):
    """What a ResourceCache needs from a resource service."""

    async def find_all(self, filter_param: Any = None) -> Any: ...

    async def find_one(self, id: str) -> Any: ...


class ResourceCache(KeyedStore, Generic[ItemT, ListT]):
    """
    Keyed list/detail cache over a resource service.

    Usage:
        deals = ResourceCache(
            DealsResource(client),
            name="deals",
            list_error="Failed to load deals",
            detail_error="Failed to load deal",
        )

        await deals.fetch_list()
        entry = deals.list_entry()
        if entry.error:
            ...
    """

    def __init__(
        self,
        service: ResourceService,
        name: str,
        list_error: str,
        detail_error: str,
        empty_list: Callable[[], ListT] = list,
        invalidate_lists_on_mutation: bool = False,
        coalesce: bool = False,
        debug: bool = False,
    ):
        super().__init__(name, coalesce=coalesce, debug=debug)
        self.service = service
        self.list_error = list_error
        self.detail_error = detail_error
        self._invalidate_lists_on_mutation = invalidate_lists_on_mutation
        self._is_mutating = False

        self.lists: EntryMap[ListT] = self._entry_map("lists", empty_list)
        self.details: EntryMap[ItemT | None] = self._entry_map("details", lambda: None)

    # Reads

    def list_entry(self, filter_param: FilterParam = None) -> CacheEntry[ListT]:
        return self.lists.read(list_key(filter_param).encode())

    def detail_entry(self, id: str) -> CacheEntry[ItemT | None]:
        return self.details.read(id)

    @property
    def is_mutating(self) -> bool:
        return self._is_mutating

    # Fetches

    async def fetch_list(self, filter_param: FilterParam = None) -> None:
        """Fetch the list for ``filter_param``; failures land in the entry."""
        key = list_key(filter_param)
        encoded = key.encode()
        self.lists.begin(encoded)
        param = _service_param(filter_param, key)
        await self._settle(
            self.lists,
            encoded,
            lambda: self.service.find_all(param),
            self.list_error,
        )

    async def fetch_detail(self, id: str) -> None:
        """Fetch one record. Callers gate empty ids; the cache does not."""
        self.details.begin(id)
        await self._settle(
            self.details,
            id,
            lambda: self.service.find_one(id),
            self.detail_error,
        )

    async def prefetch_detail(self, id: str) -> None:
        """Fetch ``id`` unless a successful record is already cached."""
        existing = self.details.get(id)
        if (
            existing is not None
            and existing.data is not None
            and existing.error is None
            and not existing.is_loading
        ):
            return
        await self.fetch_detail(id)

    def invalidate_lists(self) -> int:
        """Forget every cached list so the next read of any filter refetches."""
        self._forget_requests("lists")
        return self.lists.clear()

    def reconcile(self) -> None:
        """
        Re-fetch the unfiltered list in the background.

        The loading state is written before this returns.
        """
        encoded = UNFILTERED.encode()
        self._forget_requests("lists", [encoded])
        self.lists.begin(encoded)
        self._spawn(
            self._settle(
                self.lists,
                encoded,
                lambda: self.service.find_all(None),
                self.list_error,
            )
        )

    # Mutations

    async def create(self, payload: Any) -> Any:
        return await self._mutate(lambda: self.service.create(payload))

    async def update(self, id: str, payload: Any) -> Any:
        return await self._mutate(
            lambda: self.service.update(id, payload), purge=(id,)
        )

    async def remove(self, id: str) -> Any:
        return await self._mutate(lambda: self.service.remove(id), purge=(id,))

    async def _mutate(
        self,
        call: Callable[[], Awaitable[R]],
        purge: Iterable[str] = (),
    ) -> R:
        self._set_mutating(True)
        try:
            result = await call()
        except Exception:
            self._set_mutating(False)
            raise

        for id in purge:
            self._purge(id)
        self._set_mutating(False)
        if self._invalidate_lists_on_mutation:
            self.invalidate_lists()
        self.reconcile()
        return result

    def _purge(self, id: str) -> None:
        """Drop every cached view of ``id`` that a mutation made stale."""
        self._forget_requests("details", [id])
        self.details.discard(id)

    def _set_mutating(self, value: bool) -> None:
        self._is_mutating = value
        self._emit("mutation", "is_mutating", CacheEntry(data=None, is_loading=value))

    def snapshot(self) -> dict[str, Any]:
        state = super().snapshot()
        state["is_mutating"] = self._is_mutating
        return state


def _service_param(filter_param: FilterParam, key: CacheKey) -> Any:
    """The argument handed to ``find_all`` for a normalised key."""
    if isinstance(key, Unfiltered):
        return None
    if isinstance(filter_param, FilteredBy):
        return filter_param.param
    return filter_param
