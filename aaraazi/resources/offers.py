"""
Offers resource, nested under a sell cycle.

POST /sell-cycles/:id/offers creates an offer; accept, reject and counter are
POSTs on the offer itself. Accepting returns the offer together with the id
of the deal it opened.
"""

from typing import Any

from aaraazi.resources.base import (
    Amount,
    ApiModel,
    BaseResource,
    dump_payload,
    to_decimal,
)
from aaraazi.resources.deals import PartyRef


class Offer(ApiModel):
    id: str
    offer_number: str = ""
    sell_cycle_id: str | None = None
    buyer_id: str | None = None
    amount: Amount = None
    token_amount: Amount = None
    counter_offer_amount: Amount = None
    conditions: str | None = None
    status: str = ""
    valid_until: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    buyer: PartyRef | None = None

    @property
    def offer_amount(self) -> float:
        return to_decimal(self.amount)


class AcceptOfferResponse(ApiModel):
    offer: Offer
    deal_id: str


class CreateOfferPayload(ApiModel):
    offer_amount: float
    contact_id: str | None = None
    buyer_name: str | None = None
    buyer_contact: str | None = None
    token_amount: float | None = None
    conditions: str | None = None
    valid_until: str | None = None
    notes: str | None = None
    agent_notes: str | None = None


class CounterOfferPayload(ApiModel):
    counter_amount: float


class OffersResource(BaseResource[Offer]):
    path = "/sell-cycles"
    label = "offer"
    model = Offer

    @property
    def service_id(self) -> str:
        return "offers"

    def _offers_path(self, sell_cycle_id: str) -> str:
        return f"{self.path}/{sell_cycle_id}/offers"

    async def find_all(self, filter_param: Any = None) -> list[Offer]:
        """Offers made on one sell cycle."""
        if not filter_param:
            return []
        data = await self._call(
            f"fetch offers for sell cycle {filter_param}",
            "GET",
            self._offers_path(filter_param),
        )
        return self.parse_list(data)

    async def create_offer(
        self, sell_cycle_id: str, payload: CreateOfferPayload | dict
    ) -> Offer:
        data = await self._call(
            "create offer",
            "POST",
            self._offers_path(sell_cycle_id),
            json_data=dump_payload(payload),
        )
        return self.parse(data)

    async def accept(self, sell_cycle_id: str, offer_id: str) -> AcceptOfferResponse:
        data = await self._call(
            "accept offer",
            "POST",
            f"{self._offers_path(sell_cycle_id)}/{offer_id}/accept",
        )
        return self.parse(data, AcceptOfferResponse)

    async def reject(self, sell_cycle_id: str, offer_id: str) -> Offer:
        data = await self._call(
            "reject offer",
            "POST",
            f"{self._offers_path(sell_cycle_id)}/{offer_id}/reject",
        )
        return self.parse(data)

    async def counter(
        self,
        sell_cycle_id: str,
        offer_id: str,
        payload: CounterOfferPayload | dict,
    ) -> Offer:
        data = await self._call(
            "counter offer",
            "POST",
            f"{self._offers_path(sell_cycle_id)}/{offer_id}/counter",
            json_data=dump_payload(payload),
        )
        return self.parse(data)
