from __future__ import annotations

import asyncio
from typing import Any

import pytest

from aaraazi.resources import (
    AgentOption,
    Contact,
    ContactPage,
    ContactStatistics,
    Country,
    Document,
    DocumentPage,
    DocumentQuery,
    Offer,
    Property,
    PropertyPage,
    PropertyWithCycles,
    PurchaseCycle,
)
from aaraazi.services import ApiError, NetworkError
from aaraazi.stores import (
    CommissionAgentsStore,
    ContactSearchStore,
    ContactsStore,
    DocumentsStore,
    LocationsStore,
    OffersStore,
    PropertiesStore,
    PurchaseCyclesStore,
)


class _FakeProperties:
    def __init__(self) -> None:
        self.list_calls: list[Any] = []
        self.with_cycles_calls: list[str] = []

    async def find_all(self, filter_param: Any = None) -> PropertyPage:
        self.list_calls.append(filter_param)
        return PropertyPage(items=[Property(id="p-1", title="Villa")])

    async def find_one(self, id: str) -> Property:
        return Property(id=id)

    async def find_one_with_cycles(self, id: str) -> PropertyWithCycles:
        self.with_cycles_calls.append(id)
        return PropertyWithCycles(property=Property(id=id))

    async def update(self, id: str, payload: Any) -> Property:
        return Property(id=id, **payload)

    async def remove(self, id: str) -> None:
        return None


@pytest.mark.asyncio
async def test_property_update_purges_detail_and_with_cycles() -> None:
    service = _FakeProperties()
    store = PropertiesStore(service)
    await store.fetch_list({"status": "ACTIVE"})
    await store.fetch_detail("p-1")
    await store.fetch_with_cycles("p-1")
    assert store.with_cycles_entry("p-1").data.property.id == "p-1"

    await store.update("p-1", {"title": "Villa 2"})
    await store.drain()

    assert "p-1" not in store.details
    assert "p-1" not in store.with_cycles
    assert store.list_entry({"status": "ACTIVE"}).is_loading  # dropped, reads as pending
    assert service.list_calls == [{"status": "ACTIVE"}, None]
    assert len(store.list_entry().data) == 1


@pytest.mark.asyncio
async def test_property_list_failure_reads_as_empty_page() -> None:
    class _Failing(_FakeProperties):
        async def find_all(self, filter_param: Any = None) -> PropertyPage:
            raise NetworkError("properties")

    store = PropertiesStore(_Failing())
    await store.fetch_list()

    entry = store.list_entry()
    assert entry.data == PropertyPage()
    assert entry.error == "Network error. Please check your connection."


class _FakePurchaseCycles:
    def __init__(self) -> None:
        self.list_calls: list[Any] = []

    async def find_all(self, filter_param: Any = None) -> list[PurchaseCycle]:
        self.list_calls.append(filter_param)
        return []

    async def find_one(self, id: str) -> PurchaseCycle:
        return PurchaseCycle(id=id)

    async def create_from_property(self, payload: Any) -> PurchaseCycle:
        return PurchaseCycle(id="pc-1", property_listing_id=payload["propertyListingId"])


@pytest.mark.asyncio
async def test_create_from_property_reconciles_unfiltered_list() -> None:
    service = _FakePurchaseCycles()
    store = PurchaseCyclesStore(service)

    created = await store.create_from_property({"propertyListingId": "pl-1"})
    await store.drain()

    assert created.property_listing_id == "pl-1"
    assert service.list_calls == [None]


class _FakeContacts:
    def __init__(self) -> None:
        self.list_calls: list[Any] = []
        self.updated: list[str] = []

    async def find_all(self, filter_param: Any = None) -> ContactPage:
        self.list_calls.append(filter_param)
        await asyncio.sleep(0)
        search = (filter_param or {}).get("search", "")
        items = [Contact(id="c-1", name=f"{search} Khan")] if search else []
        return ContactPage(items=items, total=len(items))

    async def find_one(self, id: str) -> Contact:
        return Contact(id=id, name="Ayesha")

    async def get_statistics(self) -> ContactStatistics:
        return ContactStatistics(total=3, by_type={"BUYER": 2, "SELLER": 1})

    async def bulk_update(self, ids: list[str], payload: Any) -> list[Contact]:
        self.updated.extend(ids)
        return [Contact(id=id) for id in ids]


@pytest.mark.asyncio
async def test_contact_statistics_entry() -> None:
    store = ContactsStore(_FakeContacts())

    assert store.statistics_entry().is_loading
    await store.fetch_statistics()

    assert store.statistics_entry().data.by_type == {"BUYER": 2, "SELLER": 1}


@pytest.mark.asyncio
async def test_contact_bulk_update_purges_every_id() -> None:
    service = _FakeContacts()
    store = ContactsStore(service)
    await store.fetch_detail("c-1")
    await store.fetch_detail("c-2")
    await store.fetch_detail("c-3")

    await store.bulk_update(["c-1", "c-2"], {"status": "INACTIVE"})
    await store.drain()

    assert list(store.details) == ["c-3"]
    assert service.updated == ["c-1", "c-2"]


@pytest.mark.asyncio
async def test_contact_search_debounces_and_ignores_short_queries() -> None:
    service = _FakeContacts()
    search = ContactSearchStore(service, debounce_ms=5)

    search.search("a")
    assert search.results_entry().data == []
    assert not search.results_entry().is_loading

    search.search("al")
    search.search("ali", limit=5)
    await search.drain()

    assert service.list_calls == [{"search": "ali", "limit": 5, "agentId": None}]
    assert [c.name for c in search.results_entry().data] == ["ali Khan"]


@pytest.mark.asyncio
async def test_contact_search_failure_leaves_empty_results_with_error() -> None:
    class _Failing(_FakeContacts):
        async def find_all(self, filter_param: Any = None) -> ContactPage:
            raise NetworkError("contacts")

    search = ContactSearchStore(_Failing(), debounce_ms=0)
    search.search("ali")
    await search.drain()

    entry = search.results_entry()
    assert entry.data == []
    assert entry.error == "Network error. Please check your connection."

    search.clear()
    assert search.results_entry().error is None


class _FakeLocations:
    def __init__(self) -> None:
        self.calls = 0
        self.fail = False

    async def get_countries(self) -> list[Country]:
        self.calls += 1
        if self.fail:
            raise RuntimeError("backend down")
        return [Country(id="pk", name="Pakistan", code="PK")]

    async def get_cities(self, country_id: str) -> list:
        self.calls += 1
        return []


@pytest.mark.asyncio
async def test_locations_are_read_through() -> None:
    service = _FakeLocations()
    store = LocationsStore(service)

    first = await store.get_countries()
    second = await store.get_countries()

    assert first == second
    assert service.calls == 1
    # empty lists are never treated as cached
    await store.get_cities("pk")
    await store.get_cities("pk")
    assert service.calls == 3
    assert await store.get_cities("") == []
    assert service.calls == 3


@pytest.mark.asyncio
async def test_location_failure_returns_empty_list() -> None:
    service = _FakeLocations()
    service.fail = True
    store = LocationsStore(service)

    assert await store.get_countries() == []
    assert store.countries_entry().error == "Failed to load countries"

    service.fail = False
    assert len(await store.get_countries()) == 1


class _FakeOffers:
    def __init__(self) -> None:
        self.list_calls: list[str] = []

    async def find_all(self, sell_cycle_id: Any = None) -> list[Offer]:
        self.list_calls.append(sell_cycle_id)
        return [Offer(id="o-1", status="PENDING")]

    async def create_offer(self, sell_cycle_id: str, payload: Any) -> Offer:
        raise ApiError("Offer amount is below the minimum", 400)

    async def reject(self, sell_cycle_id: str, offer_id: str) -> Offer:
        return Offer(id=offer_id, status="REJECTED")


@pytest.mark.asyncio
async def test_offer_mutation_state_is_per_operation() -> None:
    service = _FakeOffers()
    store = OffersStore(service)
    await store.fetch_offers("sc-1")

    with pytest.raises(ApiError):
        await store.create_offer("sc-1", {"offerAmount": 10})
    rejected = await store.reject_offer("sc-1", "o-1")
    await store.drain()

    assert store.mutation_entry("create").error == "Offer amount is below the minimum"
    assert store.mutation_entry("reject").error is None
    assert not store.mutation_entry("accept").is_loading
    assert rejected.status == "REJECTED"
    assert service.list_calls == ["sc-1", "sc-1"]


@pytest.mark.asyncio
async def test_contact_mutation_error_is_recorded_and_reraised() -> None:
    class _Rejecting(_FakeContacts):
        async def create(self, payload: Any) -> Contact:
            raise ApiError("Phone already registered", 409)

        async def bulk_delete(self, ids: list[str]) -> None:
            raise RuntimeError("boom")

    store = ContactsStore(_Rejecting())

    with pytest.raises(ApiError):
        await store.create({"name": "Ayesha"})
    assert store.mutation_error == "Phone already registered"
    assert store.snapshot()["mutation_error"] == "Phone already registered"

    with pytest.raises(RuntimeError):
        await store.bulk_delete(["c-1"])
    assert store.mutation_error == "Failed to bulk delete contacts"
    assert not store.is_mutating

    await store.bulk_update(["c-1"], {"status": "ACTIVE"})
    await store.drain()
    assert store.mutation_error is None


class _FakeDocuments:
    def __init__(self) -> None:
        self.list_calls: list[Any] = []
        self.deleted: list[str] = []

    async def find_all(self, filter_param: Any = None) -> DocumentPage:
        self.list_calls.append(filter_param)
        return DocumentPage(items=[Document(id="d-1")], total=1)

    async def find_one(self, id: str) -> Document:
        return Document(id=id)

    async def bulk_delete(self, ids: list[str]) -> None:
        self.deleted.extend(ids)


@pytest.mark.asyncio
async def test_document_lists_are_keyed_by_filters_and_query() -> None:
    service = _FakeDocuments()
    store = DocumentsStore(service)
    store.set_filters(DocumentQuery(property_id="pl-1", status="DRAFT"))

    await store.fetch_list(DocumentQuery(status="SIGNED"))

    assert service.list_calls == [{"propertyId": "pl-1", "status": "SIGNED"}]
    assert store.list_entry(DocumentQuery(status="SIGNED")).data.total == 1
    assert store.list_entry().is_loading

    store.clear_filters()
    assert store.list_entry(
        DocumentQuery(property_id="pl-1", status="SIGNED")
    ).data.total == 1


@pytest.mark.asyncio
async def test_document_bulk_delete_purges_and_drops_every_list() -> None:
    service = _FakeDocuments()
    store = DocumentsStore(service)
    await store.fetch_list(DocumentQuery(status="SIGNED"))
    await store.fetch_detail("d-1")
    await store.fetch_detail("d-2")

    await store.bulk_delete(["d-1"])
    await store.drain()

    assert service.deleted == ["d-1"]
    assert list(store.details) == ["d-2"]
    assert list(store.lists) == ["all"]
    assert service.list_calls[-1] is None


class _FakeCommission:
    def __init__(self) -> None:
        self.fail = False

    async def get_external_brokers(self) -> list[AgentOption]:
        if self.fail:
            raise NetworkError("contacts")
        return [AgentOption(id="c-1", name="Bilal")]


@pytest.mark.asyncio
async def test_commission_brokers_fetch_fail_and_clear() -> None:
    service = _FakeCommission()
    store = CommissionAgentsStore(service)
    assert store.brokers_entry().data == []
    assert not store.brokers_entry().is_loading

    await store.fetch_brokers()
    assert [b.name for b in store.brokers_entry().data] == ["Bilal"]

    service.fail = True
    await store.fetch_brokers()
    entry = store.brokers_entry()
    assert entry.data == []
    assert entry.error == "Network error. Please check your connection."

    store.clear()
    assert store.brokers_entry().error is None
