"""
Resource services - one thin HTTP wrapper per backend resource.
"""

from aaraazi.resources.base import ApiModel, BaseResource, dump_payload, to_decimal
from aaraazi.resources.commission import AgentOption, CommissionResource
from aaraazi.resources.contacts import (
    Contact,
    ContactPage,
    ContactQuery,
    ContactsResource,
    ContactStatistics,
    CreateContactPayload,
    UpdateContactPayload,
)
from aaraazi.resources.cycles import (
    CreatePurchaseCycleFromPropertyPayload,
    CreatePurchaseCyclePayload,
    CreateRentCyclePayload,
    CreateSellCyclePayload,
    PurchaseCycle,
    PurchaseCyclesResource,
    RentCycle,
    RentCyclesResource,
    SellCycle,
    SellCyclesResource,
    UpdateRentCyclePayload,
    UpdateSellCyclePayload,
)
from aaraazi.resources.deals import Deal, DealsResource
from aaraazi.resources.documents import (
    CreateDocumentPayload,
    Document,
    DocumentPage,
    DocumentQuery,
    DocumentsResource,
    UpdateDocumentPayload,
)
from aaraazi.resources.locations import Area, Block, City, Country, LocationsResource
from aaraazi.resources.offers import (
    AcceptOfferResponse,
    CounterOfferPayload,
    CreateOfferPayload,
    Offer,
    OffersResource,
)
from aaraazi.resources.properties import (
    Pagination,
    PropertiesResource,
    Property,
    PropertyPage,
    PropertyWithCycles,
)
from aaraazi.resources.requirements import Requirement, RequirementsResource

__all__ = [
    "ApiModel",
    "BaseResource",
    "dump_payload",
    "to_decimal",
    # Deals
    "Deal",
    "DealsResource",
    # Cycles
    "SellCycle",
    "SellCyclesResource",
    "CreateSellCyclePayload",
    "UpdateSellCyclePayload",
    "PurchaseCycle",
    "PurchaseCyclesResource",
    "CreatePurchaseCyclePayload",
    "CreatePurchaseCycleFromPropertyPayload",
    "RentCycle",
    "RentCyclesResource",
    "CreateRentCyclePayload",
    "UpdateRentCyclePayload",
    # Requirements
    "Requirement",
    "RequirementsResource",
    # Properties
    "Property",
    "PropertyPage",
    "Pagination",
    "PropertyWithCycles",
    "PropertiesResource",
    # Contacts
    "Contact",
    "ContactPage",
    "ContactQuery",
    "ContactStatistics",
    "CreateContactPayload",
    "UpdateContactPayload",
    "ContactsResource",
    # Offers
    "Offer",
    "AcceptOfferResponse",
    "CreateOfferPayload",
    "CounterOfferPayload",
    "OffersResource",
    # Locations
    "Country",
    "City",
    "Area",
    "Block",
    "LocationsResource",
    # Documents
    "Document",
    "DocumentPage",
    "DocumentQuery",
    "CreateDocumentPayload",
    "UpdateDocumentPayload",
    "DocumentsResource",
    # Commission agents
    "AgentOption",
    "CommissionResource",
]
