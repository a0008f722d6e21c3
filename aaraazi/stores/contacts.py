"""
Contacts stores.

ContactsStore caches paginated query results, contact details and the
statistics summary. ContactSearchStore backs the type-ahead contact picker:
it waits for the user to stop typing before asking the backend.
"""

import asyncio
from collections.abc import Awaitable, Sequence
from typing import Any, TypeVar

from aaraazi.cache import CacheEntry, KeyedStore, ResourceCache
from aaraazi.cache.keys import FilterParam
from aaraazi.resources.contacts import (
    Contact,
    ContactPage,
    ContactQuery,
    ContactsResource,
    ContactStatistics,
    UpdateContactPayload,
)
from aaraazi.services.errors import failure_reason

R = TypeVar("R")

STATISTICS_KEY = "summary"
RESULTS_KEY = "results"
MIN_QUERY_LENGTH = 2
DEFAULT_SEARCH_LIMIT = 10


def _query_params(query: ContactQuery | FilterParam) -> FilterParam:
    if isinstance(query, ContactQuery):
        return query.to_params()
    return query


class ContactsStore(ResourceCache[Contact, ContactPage]):
    def __init__(
        self, service: ContactsResource, coalesce: bool = False, debug: bool = False
    ):
        super().__init__(
            service,
            name="contacts",
            list_error="Failed to load contacts",
            detail_error="Failed to load contact",
            empty_list=ContactPage,
            invalidate_lists_on_mutation=True,
            coalesce=coalesce,
            debug=debug,
        )
        self.statistics = self._entry_map("statistics", lambda: None)
        self._mutation_error: str | None = None

    @property
    def mutation_error(self) -> str | None:
        """Reason the last create/update/remove/bulk call failed, if it did."""
        return self._mutation_error

    def list_entry(
        self, filter_param: ContactQuery | FilterParam = None
    ) -> CacheEntry[ContactPage]:
        return super().list_entry(_query_params(filter_param))

    async def fetch_list(self, filter_param: ContactQuery | FilterParam = None) -> None:
        await super().fetch_list(_query_params(filter_param))

    def statistics_entry(self) -> CacheEntry[ContactStatistics | None]:
        return self.statistics.read(STATISTICS_KEY)

    async def fetch_statistics(self) -> None:
        self.statistics.begin(STATISTICS_KEY)
        await self._settle(
            self.statistics,
            STATISTICS_KEY,
            self.service.get_statistics,
            "Failed to load contact statistics",
        )

    async def create(self, payload: Any) -> Contact:
        return await self._tracked(super().create(payload), "Failed to create contact")

    async def update(self, id: str, payload: Any) -> Contact:
        return await self._tracked(
            super().update(id, payload), "Failed to update contact"
        )

    async def remove(self, id: str) -> Any:
        return await self._tracked(super().remove(id), "Failed to delete contact")

    async def bulk_update(
        self, ids: Sequence[str], payload: UpdateContactPayload | dict[str, Any]
    ) -> list[Contact]:
        return await self._tracked(
            self._mutate(lambda: self.service.bulk_update(ids, payload), purge=ids),
            "Failed to bulk update contacts",
        )

    async def bulk_delete(self, ids: Sequence[str]) -> None:
        await self._tracked(
            self._mutate(lambda: self.service.bulk_delete(ids), purge=ids),
            "Failed to bulk delete contacts",
        )

    async def _tracked(self, mutation: Awaitable[R], fallback: str) -> R:
        self._set_mutation_error(None)
        try:
            return await mutation
        except Exception as e:
            self._set_mutation_error(failure_reason(e, fallback))
            raise

    def _set_mutation_error(self, reason: str | None) -> None:
        self._mutation_error = reason
        self._emit(
            "mutation", "error", CacheEntry(data=None, is_loading=False, error=reason)
        )

    def snapshot(self) -> dict[str, Any]:
        state = super().snapshot()
        state["mutation_error"] = self._mutation_error
        return state


class ContactSearchStore(KeyedStore):
    """
    Debounced contact search.

    ``search`` returns immediately; the request goes out once no newer search
    has arrived for ``debounce_ms``. Each call cancels the previous pending
    search, including one already waiting on the network.

    Usage:
        search = ContactSearchStore(ContactsResource(client))
        search.search("ali")
        await search.drain()
        search.results_entry().data  # list[Contact]
    """

    def __init__(
        self,
        service: ContactsResource,
        debounce_ms: int = 300,
        debug: bool = False,
    ):
        super().__init__("contact_search", debug=debug)
        self.service = service
        self.debounce_ms = debounce_ms
        self.results = self._entry_map("results", list)
        self.results.succeed(RESULTS_KEY, [])
        self._pending: asyncio.Task[Any] | None = None

    def results_entry(self) -> CacheEntry[list[Contact]]:
        return self.results.read(RESULTS_KEY)

    def search(
        self,
        query: str,
        limit: int = DEFAULT_SEARCH_LIMIT,
        agent_id: str | None = None,
    ) -> None:
        self._cancel_pending()
        if not query or len(query) < MIN_QUERY_LENGTH:
            self.results.succeed(RESULTS_KEY, [])
            return
        self._pending = self._spawn(self._run(query, limit, agent_id))

    def clear(self) -> None:
        self._cancel_pending()
        self.results.succeed(RESULTS_KEY, [])

    async def _run(self, query: str, limit: int, agent_id: str | None) -> None:
        await asyncio.sleep(self.debounce_ms / 1000)
        self._log(f"searching {query!r}")
        self.results.begin(RESULTS_KEY)
        await self._settle(
            self.results,
            RESULTS_KEY,
            lambda: self._find(query, limit, agent_id),
            "Contact search failed",
        )

    async def _find(self, query: str, limit: int, agent_id: str | None) -> list[Contact]:
        page = await self.service.find_all(
            {"search": query, "limit": limit, "agentId": agent_id}
        )
        return page.items

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
