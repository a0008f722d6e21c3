"""
Sell, purchase and rent cycle stores.

Lists are keyed by the property listing (sell, rent) or the buyer requirement
(purchase). Every successful mutation re-fetches the unfiltered list.
"""

from typing import Any

from aaraazi.cache import ResourceCache
from aaraazi.resources.cycles import (
    CreatePurchaseCycleFromPropertyPayload,
    PurchaseCycle,
    PurchaseCyclesResource,
    RentCycle,
    RentCyclesResource,
    SellCycle,
    SellCyclesResource,
)


class SellCyclesStore(ResourceCache[SellCycle, list[SellCycle]]):
    def __init__(
        self, service: SellCyclesResource, coalesce: bool = False, debug: bool = False
    ):
        super().__init__(
            service,
            name="sell_cycles",
            list_error="Failed to load sell cycles",
            detail_error="Failed to load sell cycle",
            coalesce=coalesce,
            debug=debug,
        )


class PurchaseCyclesStore(ResourceCache[PurchaseCycle, list[PurchaseCycle]]):
    def __init__(
        self,
        service: PurchaseCyclesResource,
        coalesce: bool = False,
        debug: bool = False,
    ):
        super().__init__(
            service,
            name="purchase_cycles",
            list_error="Failed to load purchase cycles",
            detail_error="Failed to load purchase cycle",
            coalesce=coalesce,
            debug=debug,
        )

    async def create_from_property(
        self, payload: CreatePurchaseCycleFromPropertyPayload | dict[str, Any]
    ) -> PurchaseCycle:
        """Open a purchase cycle straight from a listing (agency or investor buy)."""
        return await self._mutate(lambda: self.service.create_from_property(payload))


class RentCyclesStore(ResourceCache[RentCycle, list[RentCycle]]):
    def __init__(
        self, service: RentCyclesResource, coalesce: bool = False, debug: bool = False
    ):
        super().__init__(
            service,
            name="rent_cycles",
            list_error="Failed to load rent cycles",
            detail_error="Failed to load rent cycle",
            coalesce=coalesce,
            debug=debug,
        )
