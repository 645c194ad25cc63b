"""
Workbench Backend: Resource Handler Unit Tests
===============================================

What:  Error mapping and the handler operations, without HTTP.

What we test:
    ✅ Exactly three store codes are rewritten, with the message preserved
    ✅ Every other store error propagates unchanged
    ✅ Handler operations against a real collection
    ✅ Handler issues one store call per operation (mocked collection)
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from workbench.exceptions import (
    ConflictError,
    DocumentError,
    DocumentStoreError,
    NotFoundError,
    StoreErrorCode,
)
from workbench.resources import DATASETS, EXPERIMENTS, MODELS, NOTEBOOKS, RESOURCES
from workbench.services.resource_handler import (
    ResourceHandler,
    map_store_error,
    store_errors_mapped,
)


class TestMapStoreError:

    def test_not_found(self):
        exc = DocumentStoreError(StoreErrorCode.DOCUMENT_NOT_FOUND, "document not found")
        mapped = map_store_error(exc, resource="models", key="k1")

        assert isinstance(mapped, NotFoundError)
        assert mapped.message == "document not found"
        assert mapped.context == {"store_code": 1202, "resource": "models", "key": "k1"}

    @pytest.mark.parametrize("code", [
        StoreErrorCode.UNIQUE_CONSTRAINT_VIOLATED,
        StoreErrorCode.CONFLICT,
    ])
    def test_conflicts(self, code):
        exc = DocumentStoreError(code, "store says no")
        mapped = map_store_error(exc)

        assert isinstance(mapped, ConflictError)
        assert mapped.message == "store says no"

    @pytest.mark.parametrize("code", [
        StoreErrorCode.COLLECTION_NOT_FOUND,
        StoreErrorCode.DUPLICATE_NAME,
        StoreErrorCode.ILLEGAL_NAME,
        StoreErrorCode.DOCUMENT_KEY_BAD,
    ])
    def test_other_codes_unmapped(self, code):
        exc = DocumentStoreError(code, "something else")
        assert map_store_error(exc) is exc

    def test_context_manager_chains_original(self):
        original = DocumentStoreError(StoreErrorCode.CONFLICT, "write-write conflict")
        with pytest.raises(ConflictError) as exc_info:
            with store_errors_mapped("models", "k"):
                raise original
        assert exc_info.value.__cause__ is original

    def test_context_manager_reraises_unmapped(self):
        original = DocumentStoreError(StoreErrorCode.COLLECTION_NOT_FOUND, "gone")
        with pytest.raises(DocumentStoreError) as exc_info:
            with store_errors_mapped("models"):
                raise original
        assert exc_info.value is original

    def test_context_manager_ignores_other_exceptions(self):
        with pytest.raises(ValueError):
            with store_errors_mapped("models"):
                raise ValueError("not a store error")


class TestDocumentErrors:

    @pytest.mark.parametrize("error_class, default", [
        (NotFoundError, "document not found"),
        (ConflictError, "conflict"),
    ])
    def test_default_message_and_context(self, error_class, default):
        error = error_class(resource="models", key="k1")

        assert isinstance(error, DocumentError)
        assert error.message == default
        assert error.context == {"resource": "models", "key": "k1"}
        assert (error.resource, error.key) == ("models", "k1")

    def test_caller_context_not_mutated(self):
        context = {"store_code": 1200}
        error = ConflictError("write-write conflict", resource="models", key="k", context=context)

        assert context == {"store_code": 1200}
        assert error.context["store_code"] == 1200
        assert error.context["key"] == "k"


class TestResourceConfigs:

    def test_four_resources(self):
        assert [r.name for r in RESOURCES] == ["datasets", "models", "experiments", "notebooks"]

    def test_collection_binding(self):
        assert DATASETS.collection == "datasets"
        assert MODELS.detail_route == "models:detail"
        assert EXPERIMENTS.label == "experiment"
        assert NOTEBOOKS.document_model.__name__ == "NotebookDocument"


class TestResourceHandler:

    def setup_method(self):
        self.handler = ResourceHandler(MODELS)

    @pytest.mark.asyncio
    async def test_create_then_get(self, db_session):
        created = await self.handler.create(db_session, {"name": "m1"})
        fetched = await self.handler.get(db_session, created["_key"])

        assert fetched == created
        assert fetched["name"] == "m1"

    @pytest.mark.asyncio
    async def test_create_duplicate_is_conflict(self, db_session):
        await self.handler.create(db_session, {"_key": "m", "name": "first"})

        with pytest.raises(ConflictError, match="unique constraint violated"):
            await self.handler.create(db_session, {"_key": "m", "name": "second"})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation, args", [
        ("get", ()),
        ("replace", ({"name": "x"},)),
        ("update", ({"name": "x"},)),
        ("delete", ()),
    ])
    async def test_missing_key_is_not_found(self, db_session, operation, args):
        with pytest.raises(NotFoundError) as exc_info:
            await getattr(self.handler, operation)(db_session, "never-inserted", *args)
        assert exc_info.value.message == "document not found"
        assert exc_info.value.key == "never-inserted"

    @pytest.mark.asyncio
    async def test_update_leaves_other_fields(self, db_session):
        created = await self.handler.create(
            db_session, {"name": "m", "framework": "torch", "version": "1"}
        )
        before = await self.handler.get(db_session, created["_key"])

        after = await self.handler.update(db_session, created["_key"], {"version": "2"})

        assert after["version"] == "2"
        for field in ("name", "framework", "_key", "_id"):
            assert after[field] == before[field]

    @pytest.mark.asyncio
    async def test_stale_revision_is_conflict(self, db_session):
        created = await self.handler.create(db_session, {"name": "m"})
        await self.handler.update(db_session, created["_key"], {"name": "n"})

        with pytest.raises(ConflictError):
            await self.handler.replace(
                db_session, created["_key"], {"name": "o"}, rev=created["_rev"]
            )

    @pytest.mark.asyncio
    async def test_list_counts_creates(self, db_session):
        keys = [(await self.handler.create(db_session, {"name": f"m{i}"}))["_key"] for i in range(5)]

        listed = await self.handler.list(db_session)

        assert sorted(doc["_key"] for doc in listed) == sorted(keys)
        for key in keys:
            assert (await self.handler.get(db_session, key))["_key"] == key

    @pytest.mark.asyncio
    async def test_unprovisioned_collection_propagates(self, session_factory):
        """No collections provisioned: the store error is not part of the taxonomy."""
        async with session_factory() as session:
            with pytest.raises(DocumentStoreError) as exc_info:
                await self.handler.list(session)
        assert exc_info.value.code is StoreErrorCode.COLLECTION_NOT_FOUND

    @pytest.mark.asyncio
    async def test_update_is_single_store_call(self):
        """Update returns the merged document from the update call itself."""
        merged = {"_key": "k", "_id": "models/k", "_rev": "r2", "name": "n"}
        collection = MagicMock()
        collection.update = AsyncMock(return_value=merged)
        collection.document = AsyncMock()

        with patch.object(ResourceHandler, "_collection", return_value=collection):
            result = await self.handler.update(AsyncMock(), "k", {"name": "n"}, rev="r1")

        assert result == merged
        collection.update.assert_awaited_once_with("k", {"name": "n"}, rev="r1")
        collection.document.assert_not_awaited()
