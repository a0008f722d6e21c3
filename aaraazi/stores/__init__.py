"""
Domain stores - one keyed cache per dashboard resource.
"""

from aaraazi.stores.commission import CommissionAgentsStore
from aaraazi.stores.contacts import ContactSearchStore, ContactsStore
from aaraazi.stores.cycles import PurchaseCyclesStore, RentCyclesStore, SellCyclesStore
from aaraazi.stores.deals import DealsStore
from aaraazi.stores.documents import DocumentsStore
from aaraazi.stores.locations import LocationsStore
from aaraazi.stores.offers import OffersStore
from aaraazi.stores.properties import PropertiesStore
from aaraazi.stores.requirements import RequirementsStore

__all__ = [
    "DealsStore",
    "SellCyclesStore",
    "PurchaseCyclesStore",
    "RentCyclesStore",
    "RequirementsStore",
    "PropertiesStore",
    "ContactsStore",
    "ContactSearchStore",
    "LocationsStore",
    "OffersStore",
    "DocumentsStore",
    "CommissionAgentsStore",
]
