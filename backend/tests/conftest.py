"""
Workbench Backend: Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own SQLite file (aiosqlite) with the tables
       created from Base.metadata and the four resource collections
       provisioned. No PostgreSQL needed.

Fixture Hierarchy:
    db_engine ─┬─ session_factory ─┬─ provisioned ─┬─ db_session   (store/service tests)
               │                   │               └─ test_client  (HTTP tests)
               │                   └─ concurrent_replace  (write-write races)
"""

import os

# Override settings for testing BEFORE any workbench imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["COLLECTION_PREFIX"] = ""
os.environ["AUTO_PROVISION_COLLECTIONS"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from contextlib import contextmanager
from typing import AsyncGenerator
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from workbench.database import Base, get_db_session
from workbench.resources import collection_names
from workbench.services.document_store import DocumentCollection, DocumentStore
from workbench.services.provisioning import setup_collections
import workbench.models  # noqa: F401


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """A fresh SQLite database file with all tables created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'workbench.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def provisioned(session_factory):
    """Creates the datasets/models/experiments/notebooks collections."""
    async with session_factory() as session:
        await setup_collections(session, collection_names())
        await session.commit()


@pytest_asyncio.fixture
async def db_session(session_factory, provisioned) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def concurrent_replace(session_factory):
    """
    Makes another writer win the race inside a single store call.

    While active, the first DocumentCollection._load on `collection` is
    followed by a replace of the same key from a separate session, committed
    before the caller flushes its own write. The caller's session still holds
    the revision it loaded.
    """

    @contextmanager
    def racing(collection: str, doc: dict):
        original_load = DocumentCollection._load
        raced = []

        async def load_then_race(self, key):
            record = await original_load(self, key)
            if self.name == collection and not raced:
                raced.append(key)
                async with session_factory() as other:
                    await DocumentStore(other).collection(collection).replace(key, doc)
                    await other.commit()
            return record

        with patch.object(DocumentCollection, "_load", load_then_race):
            yield raced

    return racing


@pytest_asyncio.fixture
async def test_client(session_factory, provisioned):
    """
    HTTPX AsyncClient talking to the FastAPI app through ASGITransport.

    get_db_session is overridden to use the per-test database, with the same
    commit-on-success / rollback-on-error behavior as production.
    raise_app_exceptions=False lets unmapped errors come back as 500
    responses instead of propagating into the test.
    """
    from workbench.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
