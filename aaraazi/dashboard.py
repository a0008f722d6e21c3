"""
Dashboard - composition root for the data layer.

Builds one ApiClient and one store per resource, and tears them down
together. Nothing here is a module-level singleton; construct a Dashboard at
startup and pass it (or its stores) to whoever needs them.
"""

from typing import Any

import httpx
from loguru import logger

from aaraazi.cache import KeyedStore
from aaraazi.resources import (
    CommissionResource,
    ContactsResource,
    DealsResource,
    DocumentsResource,
    LocationsResource,
    OffersResource,
    PropertiesResource,
    PurchaseCyclesResource,
    RentCyclesResource,
    RequirementsResource,
    SellCyclesResource,
)
from aaraazi.services.client import ApiClient
from aaraazi.settings import Settings, global_settings
from aaraazi.stores import (
    CommissionAgentsStore,
    ContactSearchStore,
    ContactsStore,
    DealsStore,
    DocumentsStore,
    LocationsStore,
    OffersStore,
    PropertiesStore,
    PurchaseCyclesStore,
    RentCyclesStore,
    RequirementsStore,
    SellCyclesStore,
)


class Dashboard:
    """
    Usage:
        async with Dashboard.from_settings() as dashboard:
            await dashboard.deals.fetch_list()
            entry = dashboard.deals.list_entry()
    """

    def __init__(
        self,
        client: ApiClient,
        coalesce: bool = False,
        contact_search_debounce_ms: int = 300,
        debug: bool = False,
    ):
        self.client = client
        opts = {"coalesce": coalesce, "debug": debug}

        self.deals = DealsStore(DealsResource(client), **opts)
        self.sell_cycles = SellCyclesStore(SellCyclesResource(client), **opts)
        self.purchase_cycles = PurchaseCyclesStore(PurchaseCyclesResource(client), **opts)
        self.rent_cycles = RentCyclesStore(RentCyclesResource(client), **opts)
        self.requirements = RequirementsStore(RequirementsResource(client), **opts)
        self.properties = PropertiesStore(PropertiesResource(client), **opts)
        self.contacts = ContactsStore(ContactsResource(client), **opts)
        self.contact_search = ContactSearchStore(
            ContactsResource(client),
            debounce_ms=contact_search_debounce_ms,
            debug=debug,
        )
        self.locations = LocationsStore(LocationsResource(client), debug=debug)
        self.offers = OffersStore(OffersResource(client), **opts)
        self.documents = DocumentsStore(DocumentsResource(client), **opts)
        self.commission_agents = CommissionAgentsStore(
            CommissionResource(ContactsResource(client)), debug=debug
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "Dashboard":
        settings = settings or global_settings
        client = ApiClient.from_settings(settings, transport=transport)
        return cls(
            client,
            coalesce=settings.coalesce_requests,
            contact_search_debounce_ms=settings.contact_search_debounce_ms,
            debug=settings.debug,
        )

    @property
    def stores(self) -> list[KeyedStore]:
        return [
            self.deals,
            self.sell_cycles,
            self.purchase_cycles,
            self.rent_cycles,
            self.requirements,
            self.properties,
            self.contacts,
            self.contact_search,
            self.locations,
            self.offers,
            self.documents,
            self.commission_agents,
        ]

    async def drain(self) -> None:
        """Wait for every background fetch in every store."""
        for store in self.stores:
            await store.drain()

    def get_health_status(self) -> dict[str, Any]:
        status = self.client.get_health_status()
        status["stores"] = {store.name: store.get_stats() for store in self.stores}
        return status

    def snapshot(self) -> dict[str, Any]:
        return {store.name: store.snapshot() for store in self.stores}

    async def close(self) -> None:
        self.contact_search.clear()
        await self.drain()
        await self.client.close()
        logger.info("Dashboard closed")

    async def __aenter__(self) -> "Dashboard":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
