"""Creates every resource collection that does not exist yet."""

import asyncio
import logging

from workbench.database import async_session_factory, dispose_engine
from workbench.main import setup_logging
from workbench.resources import collection_names
from workbench.services.provisioning import setup_collections

logger = logging.getLogger("workbench.scripts.setup")


async def run() -> None:
    try:
        async with async_session_factory() as session:
            created = await setup_collections(session, collection_names())
            await session.commit()
    finally:
        await dispose_engine()
    for name in created:
        logger.info("Created collection %s", name)
    logger.info("Setup complete: %d created, %d already present",
                len(created), len(collection_names()) - len(created))


def main() -> None:
    setup_logging()
    asyncio.run(run())


if __name__ == "__main__":
    main()
