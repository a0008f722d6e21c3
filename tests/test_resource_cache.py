from __future__ import annotations

import asyncio
from typing import Any

import pytest

from aaraazi.cache import CacheEntry, CacheEvent, ResourceCache
from aaraazi.services.errors import ApiError, NetworkError


class _FakeService:
    """In-memory resource service that records every call."""

    def __init__(self) -> None:
        self.lists: dict[Any, list[dict[str, Any]]] = {None: []}
        self.records: dict[str, dict[str, Any]] = {}
        self.list_calls: list[Any] = []
        self.detail_calls: list[str] = []
        self.fail_with: Exception | None = None

    async def find_all(self, filter_param: Any = None) -> list[dict[str, Any]]:
        self.list_calls.append(filter_param)
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise self.fail_with
        return list(self.lists.get(filter_param, []))

    async def find_one(self, id: str) -> dict[str, Any]:
        self.detail_calls.append(id)
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise self.fail_with
        return self.records[id]

    async def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise self.fail_with
        record = {"id": f"deal-{len(self.records) + 1}", **payload}
        self.records[record["id"]] = record
        self.lists[None] = [*self.lists[None], record]
        return record

    async def update(self, id: str, payload: dict[str, Any]) -> dict[str, Any]:
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise self.fail_with
        self.records[id] = {**self.records[id], **payload}
        return self.records[id]

    async def remove(self, id: str) -> None:
        await asyncio.sleep(0)
        self.records.pop(id, None)


class _GatedService(_FakeService):
    """find_one blocks until the test releases the matching gate."""

    def __init__(self) -> None:
        super().__init__()
        self.gates: list[tuple[asyncio.Event, dict[str, Any]]] = []

    def add_gate(self, result: dict[str, Any]) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates.append((gate, result))
        return gate

    async def find_one(self, id: str) -> dict[str, Any]:
        self.detail_calls.append(id)
        gate, result = self.gates.pop(0)
        await gate.wait()
        return result


class _GatedListService(_FakeService):
    """find_all reads the list when called, then blocks on the next gate."""

    def __init__(self) -> None:
        super().__init__()
        self.list_gates: list[asyncio.Event] = []

    def add_list_gate(self) -> asyncio.Event:
        gate = asyncio.Event()
        self.list_gates.append(gate)
        return gate

    async def find_all(self, filter_param: Any = None) -> list[dict[str, Any]]:
        self.list_calls.append(filter_param)
        rows = list(self.lists.get(filter_param, []))
        await self.list_gates.pop(0).wait()
        return rows


def _make_cache(service: _FakeService, **kwargs: Any) -> ResourceCache:
    return ResourceCache(
        service,
        name="deals",
        list_error="Failed to load deals",
        detail_error="Failed to load deal",
        **kwargs,
    )


@pytest.mark.asyncio
async def test_fetch_list_isolates_keys() -> None:
    service = _FakeService()
    service.lists["listing-1"] = [{"id": "a"}]
    service.lists["listing-2"] = [{"id": "b"}]
    cache = _make_cache(service)

    await cache.fetch_list("listing-2")
    before = cache.list_entry("listing-2")

    await cache.fetch_list("listing-1")

    assert cache.list_entry("listing-2") is before
    assert cache.list_entry("listing-1").data == [{"id": "a"}]


@pytest.mark.asyncio
async def test_successful_fetch_settles_with_data() -> None:
    service = _FakeService()
    service.lists[None] = [{"id": "deal-1"}]
    cache = _make_cache(service)

    await cache.fetch_list()

    assert cache.list_entry() == CacheEntry(
        data=[{"id": "deal-1"}], is_loading=False, error=None
    )


@pytest.mark.asyncio
async def test_network_failure_clears_data_and_records_reason() -> None:
    service = _FakeService()
    service.lists[None] = [{"id": "deal-1"}]
    cache = _make_cache(service)
    await cache.fetch_list()

    service.fail_with = NetworkError("deals")
    await cache.fetch_list()

    assert cache.list_entry() == CacheEntry(
        data=[],
        is_loading=False,
        error="Network error. Please check your connection.",
    )


@pytest.mark.asyncio
async def test_failure_without_reason_uses_fallback_message() -> None:
    service = _FakeService()
    service.fail_with = RuntimeError("boom")
    cache = _make_cache(service)

    await cache.fetch_list()
    await cache.fetch_detail("deal-42")

    assert cache.list_entry().error == "Failed to load deals"
    assert cache.detail_entry("deal-42") == CacheEntry(
        data=None, is_loading=False, error="Failed to load deal"
    )


@pytest.mark.asyncio
async def test_loading_state_precedes_exactly_one_terminal_state() -> None:
    service = _FakeService()
    service.records["deal-42"] = {"id": "deal-42"}
    cache = _make_cache(service)
    seen: list[CacheEntry[Any] | None] = []
    cache.subscribe(lambda event: seen.append(event.entry) if event.key == "deal-42" else None)

    await cache.fetch_detail("deal-42")
    await cache.fetch_detail("deal-42")

    assert [e.is_loading for e in seen] == [True, False, True, False]
    assert all(e.error is None for e in seen)
    # the second attempt keeps the previous record while it loads
    assert seen[2].data == {"id": "deal-42"}


@pytest.mark.asyncio
async def test_unfetched_detail_reads_as_pending_default() -> None:
    cache = _make_cache(_FakeService())

    assert cache.detail_entry("deal-42") == CacheEntry(data=None, is_loading=True)
    assert cache.list_entry() == CacheEntry(data=[], is_loading=True)


@pytest.mark.asyncio
async def test_fetch_detail_marks_loading_before_the_response() -> None:
    service = _GatedService()
    gate = service.add_gate({"id": "deal-42", "title": "Plot 7"})
    cache = _make_cache(service)

    task = asyncio.create_task(cache.fetch_detail("deal-42"))
    await asyncio.sleep(0)
    assert cache.detail_entry("deal-42") == CacheEntry(data=None, is_loading=True)

    gate.set()
    await task

    assert cache.detail_entry("deal-42") == CacheEntry(
        data={"id": "deal-42", "title": "Plot 7"}, is_loading=False, error=None
    )


@pytest.mark.asyncio
async def test_overlapping_detail_fetches_last_resolution_wins() -> None:
    service = _GatedService()
    first = service.add_gate({"id": "deal-42", "version": 1})
    second = service.add_gate({"id": "deal-42", "version": 2})
    cache = _make_cache(service)

    t1 = asyncio.create_task(cache.fetch_detail("deal-42"))
    t2 = asyncio.create_task(cache.fetch_detail("deal-42"))
    await asyncio.sleep(0)

    second.set()
    await t2
    assert cache.detail_entry("deal-42").data == {"id": "deal-42", "version": 2}

    first.set()
    await t1
    assert cache.detail_entry("deal-42").data == {"id": "deal-42", "version": 1}
    assert service.detail_calls == ["deal-42", "deal-42"]


@pytest.mark.asyncio
async def test_coalescing_shares_one_in_flight_request() -> None:
    service = _GatedService()
    gate = service.add_gate({"id": "deal-42"})
    cache = _make_cache(service, coalesce=True)

    t1 = asyncio.create_task(cache.fetch_detail("deal-42"))
    t2 = asyncio.create_task(cache.fetch_detail("deal-42"))
    await asyncio.sleep(0)
    gate.set()
    await asyncio.gather(t1, t2)

    assert service.detail_calls == ["deal-42"]
    assert cache.detail_entry("deal-42").data == {"id": "deal-42"}


@pytest.mark.asyncio
async def test_coalesced_refetch_after_create_does_not_join_older_request() -> None:
    service = _GatedListService()
    before = service.add_list_gate()
    after = service.add_list_gate()
    cache = _make_cache(service, coalesce=True)

    stale = asyncio.create_task(cache.fetch_list())
    while not service.list_calls:
        await asyncio.sleep(0)

    created = await cache.create({"title": "New deal"})
    for _ in range(5):
        await asyncio.sleep(0)
    assert service.list_calls == [None, None]

    before.set()
    await stale
    assert cache.list_entry().data == []

    after.set()
    await cache.drain()
    assert cache.list_entry().data == [created]


@pytest.mark.asyncio
async def test_coalesced_detail_fetch_after_update_starts_a_new_request() -> None:
    service = _GatedService()
    service.records["deal-42"] = {"id": "deal-42", "status": "ACTIVE"}
    first = service.add_gate({"id": "deal-42", "status": "ACTIVE"})
    second = service.add_gate({"id": "deal-42", "status": "ON_HOLD"})
    cache = _make_cache(service, coalesce=True)

    stale = asyncio.create_task(cache.fetch_detail("deal-42"))
    while not service.detail_calls:
        await asyncio.sleep(0)

    await cache.update("deal-42", {"status": "ON_HOLD"})
    fresh = asyncio.create_task(cache.fetch_detail("deal-42"))
    for _ in range(5):
        await asyncio.sleep(0)
    assert service.detail_calls == ["deal-42", "deal-42"]

    second.set()
    await fresh
    assert cache.detail_entry("deal-42").data["status"] == "ON_HOLD"

    first.set()
    await stale
    await cache.drain()


@pytest.mark.asyncio
async def test_create_refetches_unfiltered_list() -> None:
    service = _FakeService()
    cache = _make_cache(service)

    created = await cache.create({"title": "New deal"})

    assert cache.list_entry().is_loading
    await cache.drain()

    assert service.list_calls == [None]
    assert cache.list_entry().data == [created]
    assert not cache.is_mutating


@pytest.mark.asyncio
async def test_update_purges_detail_so_next_read_hits_network() -> None:
    service = _FakeService()
    service.records["deal-42"] = {"id": "deal-42", "status": "ACTIVE"}
    cache = _make_cache(service)
    await cache.fetch_detail("deal-42")

    await cache.update("deal-42", {"status": "ON_HOLD"})

    assert "deal-42" not in cache.details
    await cache.fetch_detail("deal-42")
    await cache.drain()

    assert service.detail_calls == ["deal-42", "deal-42"]
    assert cache.detail_entry("deal-42").data["status"] == "ON_HOLD"


@pytest.mark.asyncio
async def test_failed_mutation_reraises_without_cache_side_effects() -> None:
    service = _FakeService()
    service.records["deal-42"] = {"id": "deal-42"}
    cache = _make_cache(service)
    await cache.fetch_detail("deal-42")
    before = cache.detail_entry("deal-42")

    service.fail_with = ApiError("Asking price must be positive", 400)
    with pytest.raises(ApiError):
        await cache.update("deal-42", {"askingPrice": -1})

    assert cache.detail_entry("deal-42") is before
    assert service.list_calls == []
    assert cache.pending_tasks == 0
    assert not cache.is_mutating


@pytest.mark.asyncio
async def test_is_mutating_is_set_while_the_call_runs() -> None:
    service = _FakeService()
    cache = _make_cache(service)
    flags: list[bool] = []
    cache.subscribe(
        lambda event: flags.append(event.entry.is_loading)
        if event.section == "mutation"
        else None
    )

    await cache.create({"title": "x"})
    await cache.drain()

    assert flags == [True, False]


@pytest.mark.asyncio
async def test_invalidate_lists_drops_every_filter() -> None:
    service = _FakeService()
    service.lists["listing-1"] = [{"id": "a"}]
    cache = _make_cache(service, invalidate_lists_on_mutation=True)
    await cache.fetch_list("listing-1")
    await cache.fetch_list()

    await cache.remove("a")
    await cache.drain()

    assert "by:listing-1" not in cache.lists
    assert cache.list_entry().is_settled


@pytest.mark.asyncio
async def test_prefetch_skips_cached_record() -> None:
    service = _FakeService()
    service.records["deal-42"] = {"id": "deal-42"}
    cache = _make_cache(service)

    await cache.prefetch_detail("deal-42")
    await cache.prefetch_detail("deal-42")

    assert service.detail_calls == ["deal-42"]


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_break_the_write() -> None:
    service = _FakeService()
    service.lists[None] = [{"id": "deal-1"}]
    cache = _make_cache(service)
    events: list[CacheEvent] = []

    def broken(_event: CacheEvent) -> None:
        raise RuntimeError("listener bug")

    cache.subscribe(broken)
    unsubscribe = cache.subscribe(events.append)
    await cache.fetch_list()
    unsubscribe()
    await cache.fetch_list()

    assert cache.list_entry().data == [{"id": "deal-1"}]
    assert [e.key for e in events] == ["all", "all"]
