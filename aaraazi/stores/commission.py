"""
Commission agents store: the external brokers offered in commission splits.
"""

from aaraazi.cache import CacheEntry, KeyedStore
from aaraazi.resources.commission import AgentOption, CommissionResource

BROKERS_KEY = "external"


class CommissionAgentsStore(KeyedStore):
    def __init__(self, service: CommissionResource, debug: bool = False):
        super().__init__("commission_agents", debug=debug)
        self.service = service
        self.brokers = self._entry_map("brokers", list)
        self.brokers.succeed(BROKERS_KEY, [])

    def brokers_entry(self) -> CacheEntry[list[AgentOption]]:
        return self.brokers.read(BROKERS_KEY)

    async def fetch_brokers(self) -> None:
        self.brokers.begin(BROKERS_KEY)
        await self._settle(
            self.brokers,
            BROKERS_KEY,
            self.service.get_external_brokers,
            "Failed to load external brokers",
        )

    def clear(self) -> None:
        self.brokers.succeed(BROKERS_KEY, [])
