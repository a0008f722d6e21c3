"""
Locations store.

Location lists rarely change, so reads go through the cache: a key holding a
non-empty successful list is served without touching the network. Failures
are recorded on the entry and the caller gets an empty list.
"""

from collections.abc import Awaitable, Callable

from aaraazi.cache import CacheEntry, EntryMap, KeyedStore
from aaraazi.resources.locations import Area, Block, City, Country, LocationsResource

COUNTRIES_KEY = "all"


class LocationsStore(KeyedStore):
    def __init__(self, service: LocationsResource, debug: bool = False):
        super().__init__("locations", debug=debug)
        self.service = service
        self.countries = self._entry_map("countries", list)
        self.cities = self._entry_map("cities", list)
        self.areas = self._entry_map("areas", list)
        self.blocks = self._entry_map("blocks", list)

    # Entries

    def countries_entry(self) -> CacheEntry[list[Country]]:
        return self.countries.read(COUNTRIES_KEY)

    def cities_entry(self, country_id: str) -> CacheEntry[list[City]]:
        return self.cities.read(country_id)

    def areas_entry(self, city_id: str) -> CacheEntry[list[Area]]:
        return self.areas.read(city_id)

    def blocks_entry(self, area_id: str) -> CacheEntry[list[Block]]:
        return self.blocks.read(area_id)

    # Read-through accessors

    async def get_countries(self) -> list[Country]:
        return await self._read_through(
            self.countries,
            COUNTRIES_KEY,
            self.service.get_countries,
            "Failed to load countries",
        )

    async def get_cities(self, country_id: str) -> list[City]:
        if not country_id:
            return []
        return await self._read_through(
            self.cities,
            country_id,
            lambda: self.service.get_cities(country_id),
            "Failed to load cities",
        )

    async def get_areas(self, city_id: str) -> list[Area]:
        if not city_id:
            return []
        return await self._read_through(
            self.areas,
            city_id,
            lambda: self.service.get_areas(city_id),
            "Failed to load areas",
        )

    async def get_blocks(self, area_id: str) -> list[Block]:
        if not area_id:
            return []
        return await self._read_through(
            self.blocks,
            area_id,
            lambda: self.service.get_blocks(area_id),
            "Failed to load blocks",
        )

    async def _read_through(
        self,
        entries: EntryMap[list],
        key: str,
        load: Callable[[], Awaitable[list]],
        fallback: str,
    ) -> list:
        cached = entries.get(key)
        if cached is not None and cached.has_data:
            self._log(f"HIT: {entries.section}[{key}]")
            return cached.data

        entries.begin(key)
        entry = await self._settle(entries, key, load, fallback)
        return entry.data
