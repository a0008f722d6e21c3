"""
Consumer bindings over the resource caches.

A binding is what a page or widget holds: it knows whether it may fetch
(``enabled``, non-empty id), fetches on mount, exposes the current entry and
offers a manual retry. Disabled bindings read an "off" entry that is neither
loading nor failed.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from aaraazi.cache import CacheEntry, CacheEvent, ResourceCache, list_key
from aaraazi.cache.keys import FilterParam

T = TypeVar("T")


def off_entry(data: T) -> CacheEntry[T]:
    return CacheEntry(data=data, is_loading=False, error=None)


class _Binding(ABC, Generic[T]):
    section: str

    def __init__(self, store: ResourceCache, enabled: bool = True):
        self.store = store
        self.enabled = enabled

    @property
    def active(self) -> bool:
        return self.enabled

    @property
    @abstractmethod
    def key(self) -> str:
        """Cache key this binding reads."""
        ...

    @property
    @abstractmethod
    def entry(self) -> CacheEntry[T]:
        ...

    @abstractmethod
    async def _fetch(self) -> None:
        ...

    async def mount(self) -> None:
        """Fetch once when the binding becomes visible; no-op while inactive."""
        if self.active:
            await self._fetch()

    async def refetch(self) -> None:
        """Manual retry, typically behind a 'Try again' button."""
        if self.active:
            await self._fetch()

    def watch(self, callback: Callable[[CacheEntry[T]], Any]) -> Callable[[], None]:
        """Call ``callback`` with the fresh entry whenever this binding's key changes."""

        def listener(event: CacheEvent) -> None:
            if event.section == self.section and event.key == self.key:
                callback(self.entry)

        return self.store.subscribe(listener)


class ListBinding(_Binding[T]):
    """
    Usage:
        binding = ListBinding(dashboard.sell_cycles, filter_param=listing_id)
        await binding.mount()
        if binding.entry.error:
            await binding.refetch()
    """

    section = "lists"

    def __init__(
        self,
        store: ResourceCache,
        filter_param: FilterParam = None,
        enabled: bool = True,
    ):
        super().__init__(store, enabled)
        self.filter_param = filter_param

    @property
    def key(self) -> str:
        return list_key(self.filter_param).encode()

    @property
    def entry(self) -> CacheEntry[T]:
        if not self.active:
            return off_entry(self.store.lists.empty_value())
        return self.store.list_entry(self.filter_param)

    async def _fetch(self) -> None:
        await self.store.fetch_list(self.filter_param)


class DetailBinding(_Binding[T]):
    section = "details"

    def __init__(self, store: ResourceCache, id: str | None, enabled: bool = True):
        super().__init__(store, enabled)
        self.id = id or ""

    @property
    def active(self) -> bool:
        return self.enabled and bool(self.id)

    @property
    def key(self) -> str:
        return self.id

    @property
    def entry(self) -> CacheEntry[T]:
        if not self.active:
            return off_entry(None)
        return self.store.detail_entry(self.id)

    async def _fetch(self) -> None:
        await self.store.fetch_detail(self.id)
