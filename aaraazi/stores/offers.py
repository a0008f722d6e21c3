"""
Offers store.

Offer lists are keyed by sell cycle. Each mutation (create, accept, reject,
counter) has its own ``{is_loading, error}`` state so one failed action does
not hide the outcome of another. Mutation failures are recorded and re-raised.
"""

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from aaraazi.cache import CacheEntry, KeyedStore
from aaraazi.resources.offers import (
    AcceptOfferResponse,
    CounterOfferPayload,
    CreateOfferPayload,
    Offer,
    OffersResource,
)
from aaraazi.services.errors import failure_reason

R = TypeVar("R")

OPERATIONS = ("create", "accept", "reject", "counter")


class OffersStore(KeyedStore):
    def __init__(self, service: OffersResource, coalesce: bool = False, debug: bool = False):
        super().__init__("offers", coalesce=coalesce, debug=debug)
        self.service = service
        self.lists = self._entry_map("lists", list)
        self.mutations = self._entry_map("mutations", lambda: None)
        for operation in OPERATIONS:
            self.mutations.succeed(operation, None)

    def offers_entry(self, sell_cycle_id: str) -> CacheEntry[list[Offer]]:
        return self.lists.read(sell_cycle_id)

    def mutation_entry(self, operation: str) -> CacheEntry[None]:
        """``{is_loading, error}`` of the last create/accept/reject/counter call."""
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown offer operation: {operation}")
        return self.mutations.read(operation)

    async def fetch_offers(self, sell_cycle_id: str) -> None:
        self.lists.begin(sell_cycle_id)
        await self._settle(
            self.lists,
            sell_cycle_id,
            lambda: self.service.find_all(sell_cycle_id),
            "Failed to load offers",
        )

    async def create_offer(
        self, sell_cycle_id: str, payload: CreateOfferPayload | dict[str, Any]
    ) -> Offer:
        return await self._run(
            "create",
            sell_cycle_id,
            lambda: self.service.create_offer(sell_cycle_id, payload),
            "Failed to create offer",
        )

    async def accept_offer(self, sell_cycle_id: str, offer_id: str) -> AcceptOfferResponse:
        return await self._run(
            "accept",
            sell_cycle_id,
            lambda: self.service.accept(sell_cycle_id, offer_id),
            "Failed to accept offer",
        )

    async def reject_offer(self, sell_cycle_id: str, offer_id: str) -> Offer:
        return await self._run(
            "reject",
            sell_cycle_id,
            lambda: self.service.reject(sell_cycle_id, offer_id),
            "Failed to reject offer",
        )

    async def counter_offer(
        self,
        sell_cycle_id: str,
        offer_id: str,
        payload: CounterOfferPayload | dict[str, Any],
    ) -> Offer:
        return await self._run(
            "counter",
            sell_cycle_id,
            lambda: self.service.counter(sell_cycle_id, offer_id, payload),
            "Failed to counter offer",
        )

    async def _run(
        self,
        operation: str,
        sell_cycle_id: str,
        call: Callable[[], Awaitable[R]],
        fallback: str,
    ) -> R:
        self.mutations.begin(operation)
        try:
            result = await call()
        except Exception as e:
            self.mutations.fail(operation, failure_reason(e, fallback))
            raise
        self.mutations.succeed(operation, None)

        # Only cycles somebody already looked at are refreshed
        if sell_cycle_id in self.lists:
            self.lists.begin(sell_cycle_id)
            self._spawn(
                self._settle(
                    self.lists,
                    sell_cycle_id,
                    lambda: self.service.find_all(sell_cycle_id),
                    "Failed to load offers",
                )
            )
        return result
