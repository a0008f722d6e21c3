"""
Deals store.
"""

from aaraazi.cache import ResourceCache
from aaraazi.resources.deals import Deal, DealsResource


class DealsStore(ResourceCache[Deal, list[Deal]]):
    """Deal list and deal detail entries; deals are read-only here."""

    def __init__(self, service: DealsResource, coalesce: bool = False, debug: bool = False):
        super().__init__(
            service,
            name="deals",
            list_error="Failed to load deals",
            detail_error="Failed to load deal",
            coalesce=coalesce,
            debug=debug,
        )
