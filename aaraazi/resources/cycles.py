"""
Sell, purchase and rent cycle resources.

All three list endpoints accept one optional filter: the property listing for
sell and rent cycles, the buyer requirement for purchase cycles.
"""

from datetime import date

from pydantic import Field

from aaraazi.resources.base import (
    Amount,
    ApiModel,
    BaseResource,
    dump_payload,
    to_decimal,
)
from aaraazi.resources.deals import PartyRef


class SellCycle(ApiModel):
    id: str
    cycle_number: str = ""
    property_listing_id: str | None = None
    agent_id: str | None = None
    status: str = ""
    start_date: str | None = None
    end_date: str | None = None
    asking_price: Amount = None
    current_offer_price: Amount = None
    notes: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    agent: PartyRef | None = None

    @property
    def asking_amount(self) -> float:
        return to_decimal(self.asking_price)


class CreateSellCyclePayload(ApiModel):
    property_listing_id: str
    asking_price: float
    start_date: str | None = None
    end_date: str | None = None
    current_offer_price: float | None = None
    notes: str | None = None


class UpdateSellCyclePayload(ApiModel):
    asking_price: float | None = None
    current_offer_price: float | None = None
    status: str | None = None
    end_date: str | None = None
    notes: str | None = None
    commission_rate: float | None = None


class SellCyclesResource(BaseResource[SellCycle]):
    path = "/sell-cycles"
    label = "sell cycle"
    model = SellCycle
    filter_name = "propertyListingId"

    async def create(self, payload: CreateSellCyclePayload | dict) -> SellCycle:
        """Create a sell cycle; the start date defaults to today."""
        body = dict(dump_payload(payload))
        if not body.get("startDate"):
            body["startDate"] = date.today().isoformat()
        return await super().create(body)


class PurchaseCycle(ApiModel):
    id: str
    cycle_number: str = ""
    requirement_id: str | None = None
    property_listing_id: str | None = None
    agent_id: str | None = None
    status: str = ""
    start_date: str | None = None
    end_date: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class CreatePurchaseCyclePayload(ApiModel):
    requirement_id: str
    start_date: str | None = None
    end_date: str | None = None


class CreatePurchaseCycleFromPropertyPayload(ApiModel):
    property_listing_id: str
    purchaser_type: str  # 'agency' | 'investor' | 'client'
    seller_name: str
    offer_amount: float
    contact_id: str | None = None
    buyer_name: str | None = None
    buyer_phone: str | None = None
    buyer_email: str | None = None
    seller_contact: str | None = None
    asking_price: float | None = None
    financing_type: str | None = None
    target_close_date: str | None = None
    notes: str | None = None
    purpose: str | None = None
    expected_resale_value: float | None = None
    renovation_budget: float | None = None
    target_roi: float | None = Field(default=None, alias="targetROI")
    investment_notes: str | None = None
    facilitation_fee: float | None = None
    commission_rate: float | None = None
    commission_type: str | None = None
    buyer_budget_min: float | None = None
    buyer_budget_max: float | None = None


class PurchaseCyclesResource(BaseResource[PurchaseCycle]):
    path = "/purchase-cycles"
    label = "purchase cycle"
    model = PurchaseCycle
    filter_name = "requirementId"
    unsupported = frozenset({"update", "remove"})

    async def create_from_property(
        self, payload: CreatePurchaseCycleFromPropertyPayload | dict
    ) -> PurchaseCycle:
        data = await self._call(
            "create purchase cycle from property",
            "POST",
            f"{self.path}/from-property",
            json_data=dump_payload(payload),
        )
        return self.parse(data)

    async def find_for_property(self, property_listing_id: str) -> list[PurchaseCycle]:
        data = await self._call(
            f"fetch purchase cycles for property {property_listing_id}",
            "GET",
            self.path,
            params={"propertyListingId": property_listing_id},
        )
        return self.parse_list(data)


class RentCycle(ApiModel):
    id: str
    cycle_number: str = ""
    property_listing_id: str | None = None
    agent_id: str | None = None
    status: str = ""
    monthly_rent: Amount = None
    security_deposit: Amount = None
    start_date: str | None = None
    end_date: str | None = None
    notes: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def monthly_rent_amount(self) -> float:
        return to_decimal(self.monthly_rent)


class CreateRentCyclePayload(ApiModel):
    property_listing_id: str
    monthly_rent: float
    security_deposit: float | None = None
    start_date: str | None = None
    end_date: str | None = None
    notes: str | None = None


class UpdateRentCyclePayload(ApiModel):
    monthly_rent: float | None = None
    security_deposit: float | None = None
    status: str | None = None
    end_date: str | None = None
    notes: str | None = None


class RentCyclesResource(BaseResource[RentCycle]):
    path = "/rent-cycles"
    label = "rent cycle"
    model = RentCycle
    filter_name = "propertyListingId"
