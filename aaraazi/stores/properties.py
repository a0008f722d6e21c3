"""
Properties store.

Besides the list and detail entries it keeps one ``with_cycles`` entry per
listing: the listing plus every sell, purchase and rent cycle run on it.
Mutations drop all cached lists, because a paginated query can no longer be
trusted once a listing changes.
"""

from aaraazi.cache import CacheEntry, ResourceCache
from aaraazi.resources.properties import (
    PropertiesResource,
    Property,
    PropertyPage,
    PropertyWithCycles,
)


class PropertiesStore(ResourceCache[Property, PropertyPage]):
    def __init__(
        self, service: PropertiesResource, coalesce: bool = False, debug: bool = False
    ):
        super().__init__(
            service,
            name="properties",
            list_error="Failed to load properties",
            detail_error="Failed to load property",
            empty_list=PropertyPage,
            invalidate_lists_on_mutation=True,
            coalesce=coalesce,
            debug=debug,
        )
        self.with_cycles = self._entry_map("with_cycles", lambda: None)

    def with_cycles_entry(self, id: str) -> CacheEntry[PropertyWithCycles | None]:
        return self.with_cycles.read(id)

    async def fetch_with_cycles(self, id: str) -> None:
        self.with_cycles.begin(id)
        await self._settle(
            self.with_cycles,
            id,
            lambda: self.service.find_one_with_cycles(id),
            self.detail_error,
        )

    def _purge(self, id: str) -> None:
        super()._purge(id)
        self._forget_requests("with_cycles", [id])
        self.with_cycles.discard(id)
