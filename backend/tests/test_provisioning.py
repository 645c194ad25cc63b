"""
Workbench Backend: Provisioning Tests
======================================

What we test:
    ✅ setup creates the four collections once, then is a no-op
    ✅ teardown drops collections with their documents
    ✅ teardown skips collections that were never created
"""

import pytest

from workbench.resources import collection_names
from workbench.services.document_store import DocumentStore
from workbench.services.provisioning import setup_collections, teardown_collections


@pytest.mark.asyncio
async def test_setup_is_idempotent(session_factory):
    async with session_factory() as session:
        first = await setup_collections(session, collection_names())
        second = await setup_collections(session, collection_names())
        await session.commit()

    assert first == ["datasets", "models", "experiments", "notebooks"]
    assert second == []


@pytest.mark.asyncio
async def test_setup_creates_only_missing(session_factory):
    async with session_factory() as session:
        await DocumentStore(session).create_collection("models")
        created = await setup_collections(session, collection_names())

    assert "models" not in created
    assert len(created) == 3


@pytest.mark.asyncio
async def test_teardown_drops_documents(db_session):
    await DocumentStore(db_session).collection("datasets").save({"name": "mnist"})

    dropped = await teardown_collections(db_session, collection_names())

    assert dropped == ["datasets", "models", "experiments", "notebooks"]
    assert await DocumentStore(db_session).collections() == []

    await setup_collections(db_session, ["datasets"])
    assert await DocumentStore(db_session).collection("datasets").all() == []


@pytest.mark.asyncio
async def test_teardown_skips_missing(session_factory):
    async with session_factory() as session:
        await setup_collections(session, ["models"])
        dropped = await teardown_collections(session, collection_names())

    assert dropped == ["models"]
