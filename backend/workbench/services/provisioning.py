"""
Workbench Backend: Collection Provisioning
===========================================

What:  Creates the resource collections before the handlers are used and
       drops them (documents included) on teardown.
Who:   Called by the application lifespan (AUTO_PROVISION_COLLECTIONS), by
       `python -m workbench.scripts.setup` / `.teardown`, and by tests.

Both operations are idempotent: existing collections are left alone on
setup, missing ones are skipped on teardown. Neither commits; the caller
owns the transaction.
"""

import logging
from typing import Iterable, List

from sqlalchemy.ext.asyncio import AsyncSession

from workbench.services.document_store import DocumentStore

logger = logging.getLogger(__name__)


async def setup_collections(session: AsyncSession, names: Iterable[str]) -> List[str]:
    """Creates every missing collection. Returns the names actually created."""
    store = DocumentStore(session)
    created = []
    for name in names:
        if await store.has_collection(name):
            logger.debug("Collection %s already exists", name)
            continue
        await store.create_collection(name)
        created.append(name)
    return created


async def teardown_collections(session: AsyncSession, names: Iterable[str]) -> List[str]:
    """Drops every existing collection with all its documents. Returns the names dropped."""
    store = DocumentStore(session)
    dropped = []
    for name in names:
        if not await store.has_collection(name):
            logger.debug("Collection %s does not exist, skipping", name)
            continue
        await store.drop_collection(name)
        dropped.append(name)
    return dropped
