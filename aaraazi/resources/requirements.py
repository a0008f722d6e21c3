"""
Buyer requirements resource (feeds the purchase cycle flow).
"""

from aaraazi.resources.base import Amount, ApiModel, BaseResource
from aaraazi.resources.deals import PartyRef


class Requirement(ApiModel):
    id: str
    requirement_number: str = ""
    type: str = ""
    status: str = ""
    property_type: str | None = None
    min_price: Amount = None
    max_price: Amount = None
    contact: PartyRef | None = None


class RequirementsResource(BaseResource[Requirement]):
    path = "/requirements"
    label = "requirement"
    model = Requirement
    read_only = True
