"""
Property listings resource.

The list endpoint is paginated and filtered by a query object; the dashboard
asks for page 1 with a limit of 1000 unless told otherwise.
"""

import asyncio
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from aaraazi.resources.base import Amount, ApiModel, BaseResource, to_decimal
from aaraazi.resources.cycles import (
    PurchaseCycle,
    PurchaseCyclesResource,
    RentCycle,
    RentCyclesResource,
    SellCycle,
    SellCyclesResource,
)
from aaraazi.resources.deals import NamedRef, PartyRef

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 1000


class PropertyAddress(ApiModel):
    plot_no: str | None = None
    street_no: str | None = None
    building_name: str | None = None
    floor_no: str | None = None
    apartment_no: str | None = None
    city_id: str | None = None
    area_id: str | None = None
    block_id: str | None = None
    city: NamedRef | None = None
    area: NamedRef | None = None
    block: NamedRef | None = None


class MasterProperty(ApiModel):
    type: str | None = None
    area: Amount = None
    area_unit: str | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    construction_year: int | None = None
    features: str | None = None  # comma separated
    current_owner_name: str | None = None
    address: PropertyAddress | None = None


class Property(ApiModel):
    id: str
    title: str = ""
    description: str | None = None
    price: Amount = None
    status: str | None = None
    listing_type: str | None = None
    agent_id: str | None = None
    agent: PartyRef | None = None
    images: str | None = None  # comma separated URLs
    master_property: MasterProperty | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def price_amount(self) -> float:
        return to_decimal(self.price)


class Pagination(ApiModel):
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    total: int = 0
    total_pages: int = 0


class PropertyPage(BaseModel):
    """One page of listings; the empty page is the list cache's empty value."""

    items: list[Property] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)


class PropertyWithCycles(BaseModel):
    property: Property | None = None
    sell_cycles: list[SellCycle] = Field(default_factory=list)
    purchase_cycles: list[PurchaseCycle] = Field(default_factory=list)
    rent_cycles: list[RentCycle] = Field(default_factory=list)


class PropertiesResource(BaseResource[Property]):
    path = "/properties"
    label = "property"
    model = Property
    update_method = "PUT"

    @property
    def plural(self) -> str:
        return "properties"

    def list_params(self, filter_param: Mapping[str, Any] | None) -> dict[str, Any]:
        params: dict[str, Any] = {"page": DEFAULT_PAGE, "limit": DEFAULT_LIMIT}
        if filter_param:
            params.update(filter_param)
        return params

    async def find_all(self, filter_param: Mapping[str, Any] | None = None) -> PropertyPage:
        data = await self._call(
            "fetch properties", "GET", self.path, params=self.list_params(filter_param)
        )
        if not isinstance(data, dict):
            return PropertyPage()

        items = self.parse_list(data.get("data"))
        raw_pagination = data.get("pagination")
        if isinstance(raw_pagination, dict):
            pagination = self.parse(raw_pagination, Pagination)
            if not raw_pagination.get("totalPages"):
                pagination.total_pages = 1
        else:
            pagination = Pagination(total=len(items), total_pages=1)
        return PropertyPage(items=items, pagination=pagination)

    async def find_one_with_cycles(self, id: str) -> PropertyWithCycles:
        """Load a listing together with every cycle run against it."""
        sell = SellCyclesResource(self.client)
        purchase = PurchaseCyclesResource(self.client)
        rent = RentCyclesResource(self.client)
        listing, sell_cycles, purchase_cycles, rent_cycles = await asyncio.gather(
            self.find_one(id),
            sell.find_all(id),
            purchase.find_for_property(id),
            rent.find_all(id),
        )
        return PropertyWithCycles(
            property=listing,
            sell_cycles=sell_cycles,
            purchase_cycles=purchase_cycles,
            rent_cycles=rent_cycles,
        )
