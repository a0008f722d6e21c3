"""
Aaraazi dashboard data layer entry point.
Loads the deals, sell cycles and requirements lists and logs a summary.
"""

import asyncio
import sys

from loguru import logger

from aaraazi.dashboard import Dashboard
from aaraazi.settings import global_settings


async def main() -> None:
    """Main entry point."""
    logger.remove()
    logger.add(sys.stderr, level=global_settings.log_level.upper())

    logger.info(f"Connecting to {global_settings.api_url}...")

    async with Dashboard.from_settings(global_settings) as dashboard:
        await asyncio.gather(
            dashboard.deals.fetch_list(),
            dashboard.sell_cycles.fetch_list(),
            dashboard.requirements.fetch_list(),
        )

        for store in (dashboard.deals, dashboard.sell_cycles, dashboard.requirements):
            entry = store.list_entry()
            if entry.error:
                logger.warning(f"{store.name}: {entry.error}")
            else:
                logger.info(f"{store.name}: {len(entry.data)} loaded")

        health = dashboard.get_health_status()
        if health["open_circuits"]:
            logger.warning(f"Open circuits: {', '.join(health['open_circuits'])}")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
