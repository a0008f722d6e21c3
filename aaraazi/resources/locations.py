"""
Location hierarchy resource: countries > cities > areas > blocks.
"""

from aaraazi.resources.base import ApiModel, BaseResource


class Country(ApiModel):
    id: str
    name: str
    code: str = ""
    currency: str | None = None


class City(ApiModel):
    id: str
    name: str
    country_id: str | None = None
    state_province: str | None = None


class Area(ApiModel):
    id: str
    name: str
    city_id: str | None = None
    postal_code: str | None = None


class Block(ApiModel):
    id: str
    name: str
    area_id: str | None = None


class LocationsResource(BaseResource[Country]):
    path = "/locations"
    label = "location"
    model = Country
    read_only = True

    async def get_countries(self) -> list[Country]:
        data = await self._call("fetch countries", "GET", f"{self.path}/countries")
        return self.parse_list(data, Country)

    async def get_cities(self, country_id: str) -> list[City]:
        data = await self._call(
            f"fetch cities for country {country_id}",
            "GET",
            f"{self.path}/countries/{country_id}/cities",
        )
        return self.parse_list(data, City)

    async def get_areas(self, city_id: str) -> list[Area]:
        data = await self._call(
            f"fetch areas for city {city_id}",
            "GET",
            f"{self.path}/cities/{city_id}/areas",
        )
        return self.parse_list(data, Area)

    async def get_blocks(self, area_id: str) -> list[Block]:
        data = await self._call(
            f"fetch blocks for area {area_id}",
            "GET",
            f"{self.path}/areas/{area_id}/blocks",
        )
        return self.parse_list(data, Block)
