"""
Deals resource.

GET /deals (list), GET /deals/:id (one with payments and stage tracking).
"""

from pydantic import Field

from aaraazi.resources.base import Amount, ApiModel, BaseResource, to_decimal

# Backend lifecycle stages as shown on the deal workspace
STAGE_TO_UI = {
    "NEGOTIATION": "offer-accepted",
    "OFFER_ACCEPTED": "offer-accepted",
    "AGREEMENT_SIGNING": "agreement-signing",
    "DOCUMENTATION": "documentation",
    "PAYMENT_PROCESSING": "payment-processing",
    "PAYMENT": "payment-processing",
    "HANDOVER_PREP": "handover-prep",
    "TRANSFER_REGISTRATION": "transfer-registration",
    "TRANSFER": "transfer-registration",
    "FINAL_HANDOVER": "final-handover",
    "COMPLETED": "completed",
}

STATUS_TO_UI = {
    "ACTIVE": "active",
    "ON_HOLD": "on-hold",
    "CANCELLED": "cancelled",
    "COMPLETED": "completed",
}


class PartyRef(ApiModel):
    id: str
    name: str = ""
    phone: str | None = None
    email: str | None = None


class NamedRef(ApiModel):
    name: str = ""


class DealAddress(ApiModel):
    full_address: str | None = None
    city: NamedRef | None = None
    area: NamedRef | None = None


class DealMasterProperty(ApiModel):
    address: DealAddress | None = None


class DealListing(ApiModel):
    id: str
    title: str | None = None
    master_property: DealMasterProperty | None = None

    @property
    def address(self) -> str:
        address = self.master_property.address if self.master_property else None
        if address is None:
            return self.title or "Property"
        parts = [
            address.full_address,
            address.area.name if address.area else None,
            address.city.name if address.city else None,
        ]
        parts = [p for p in parts if p]
        return ", ".join(parts) if parts else (self.title or "Property")


class DealPayment(ApiModel):
    id: str
    amount: Amount = None
    due_date: str | None = None
    paid_date: str | None = None
    payment_number: str | None = None

    @property
    def is_paid(self) -> bool:
        return bool(self.paid_date)


class StageTracking(ApiModel):
    id: str
    stage: str
    status: str | None = None
    started_at: str | None = None
    completed_at: str | None = None


class Deal(ApiModel):
    """A deal as returned by the backend, with dashboard-facing views."""

    id: str
    deal_number: str = ""
    tenant_id: str | None = None
    agency_id: str | None = None
    status: str = "ACTIVE"
    stage: str = "OFFER_ACCEPTED"
    agreed_price: Amount = None
    commission_total: Amount = None
    notes: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    closing_date: str | None = None
    primary_agent: PartyRef | None = None
    secondary_agent: PartyRef | None = None
    buyer_contact: PartyRef | None = None
    seller_contact: PartyRef | None = None
    property_listing: DealListing | None = None
    payments: list[DealPayment] = Field(default_factory=list)
    stage_trackings: list[StageTracking] = Field(default_factory=list)

    @property
    def ui_stage(self) -> str:
        return STAGE_TO_UI.get(self.stage, "offer-accepted")

    @property
    def ui_status(self) -> str:
        return STATUS_TO_UI.get(self.status, "active")

    @property
    def agreed_amount(self) -> float:
        return to_decimal(self.agreed_price)

    @property
    def commission_amount(self) -> float:
        return to_decimal(self.commission_total)

    @property
    def total_paid(self) -> float:
        return sum((to_decimal(p.amount) for p in self.payments if p.is_paid), 0.0)

    @property
    def balance_remaining(self) -> float:
        return max(0.0, self.agreed_amount - self.total_paid)

    @property
    def property_address(self) -> str:
        if self.property_listing is None:
            return "Property"
        return self.property_listing.address

    def completed_stages(self) -> list[str]:
        return [
            STAGE_TO_UI.get(t.stage, t.stage)
            for t in self.stage_trackings
            if t.completed_at
        ]


class DealsResource(BaseResource[Deal]):
    path = "/deals"
    label = "deal"
    model = Deal
    read_only = True

