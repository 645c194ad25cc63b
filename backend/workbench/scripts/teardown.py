"""
Drops every resource collection together with all of its documents.

Whole collections are removed, not individual documents. Collections that
do not exist are skipped.
"""

import asyncio
import logging

from workbench.database import async_session_factory, dispose_engine
from workbench.main import setup_logging
from workbench.resources import collection_names
from workbench.services.provisioning import teardown_collections

logger = logging.getLogger("workbench.scripts.teardown")


async def run() -> None:
    try:
        async with async_session_factory() as session:
            dropped = await teardown_collections(session, collection_names())
            await session.commit()
    finally:
        await dispose_engine()
    logger.info("Teardown complete: dropped %s", ", ".join(dropped) or "nothing")


def main() -> None:
    setup_logging()
    asyncio.run(run())


if __name__ == "__main__":
    main()
