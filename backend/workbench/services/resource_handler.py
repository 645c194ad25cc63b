"""
Workbench Backend: Generic Resource Handler
============================================

What:  List/create/get/replace/update/delete over one document collection,
       with one error-mapping policy shared by every resource.
Why:   Datasets, models, experiments and notebooks behave identically; only
       their ResourceConfig differs. One handler class instantiated four
       times replaces four copies of the same route logic.
How:   Each operation is exactly one call into DocumentCollection, wrapped in
       `store_errors_mapped()`, which rewrites three store error codes into
       NotFoundError / ConflictError and lets everything else through as-is.

Error mapping policy:
    DOCUMENT_NOT_FOUND          → NotFoundError  (404)
    UNIQUE_CONSTRAINT_VIOLATED  → ConflictError  (409)
    CONFLICT                    → ConflictError  (409)
    any other store error       → re-raised unchanged (500)

    The store's message text is kept verbatim in the mapped error.

Design Decision:
    The handler holds only its ResourceConfig. Sessions are passed per call,
    so the same instance serves concurrent requests without shared state.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession

from workbench.exceptions import (
    ConflictError,
    DocumentStoreError,
    NotFoundError,
    StoreErrorCode,
)
from workbench.schemas.document import DocumentBase
from workbench.services.document_store import DocumentCollection, DocumentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceConfig:
    """
    Everything that distinguishes one resource from another.

    Attributes:
        name:            URL segment and route-name prefix, e.g. "models"
        label:           Singular noun used in docs and tags, e.g. "model"
        collection:      Qualified collection name in the document store
        document_model:  Pydantic shape for create/replace bodies
    """

    name: str
    label: str
    collection: str
    document_model: Type[DocumentBase]

    @property
    def detail_route(self) -> str:
        """Route name of the detail endpoint, used to build Location headers."""
        return f"{self.name}:detail"


_NOT_FOUND_CODES = frozenset({StoreErrorCode.DOCUMENT_NOT_FOUND})
_CONFLICT_CODES = frozenset({
    StoreErrorCode.UNIQUE_CONSTRAINT_VIOLATED,
    StoreErrorCode.CONFLICT,
})


def map_store_error(
    exc: DocumentStoreError,
    resource: Optional[str] = None,
    key: Optional[str] = None,
) -> Exception:
    """
    Classifies a store error.

    Returns NotFoundError or ConflictError for the three recognized codes,
    and the original exception otherwise.
    """
    context = {"store_code": int(exc.code)}
    if exc.code in _NOT_FOUND_CODES:
        return NotFoundError(exc.message, resource=resource, key=key, context=context)
    if exc.code in _CONFLICT_CODES:
        return ConflictError(exc.message, resource=resource, key=key, context=context)
    return exc


@contextmanager
def store_errors_mapped(
    resource: Optional[str] = None,
    key: Optional[str] = None,
) -> Iterator[None]:
    try:
        yield
    except DocumentStoreError as exc:
        mapped = map_store_error(exc, resource=resource, key=key)
        if mapped is exc:
            raise
        raise mapped from exc


class ResourceHandler:
    """CRUD over the collection named by `config`."""

    def __init__(self, config: ResourceConfig):
        self.config = config

    def _collection(self, session: AsyncSession) -> DocumentCollection:
        return DocumentStore(session).collection(self.config.collection)

    async def list(self, session: AsyncSession) -> List[Dict[str, Any]]:
        with store_errors_mapped(self.config.name):
            return await self._collection(session).all()

    async def create(self, session: AsyncSession, doc: Mapping[str, Any]) -> Dict[str, Any]:
        with store_errors_mapped(self.config.name, doc.get("_key")):
            created = await self._collection(session).save(doc)
        logger.info("Created %s %s", self.config.label, created["_key"])
        return created

    async def get(self, session: AsyncSession, key: str) -> Dict[str, Any]:
        with store_errors_mapped(self.config.name, key):
            return await self._collection(session).document(key)

    async def replace(
        self,
        session: AsyncSession,
        key: str,
        doc: Mapping[str, Any],
        rev: Optional[str] = None,
    ) -> Dict[str, Any]:
        with store_errors_mapped(self.config.name, key):
            replaced = await self._collection(session).replace(key, doc, rev=rev)
        logger.info("Replaced %s %s (rev %s)", self.config.label, key, replaced["_rev"])
        return replaced

    async def update(
        self,
        session: AsyncSession,
        key: str,
        partial: Mapping[str, Any],
        rev: Optional[str] = None,
    ) -> Dict[str, Any]:
        with store_errors_mapped(self.config.name, key):
            updated = await self._collection(session).update(key, partial, rev=rev)
        logger.info("Updated %s %s (rev %s)", self.config.label, key, updated["_rev"])
        return updated

    async def delete(self, session: AsyncSession, key: str, rev: Optional[str] = None) -> None:
        with store_errors_mapped(self.config.name, key):
            await self._collection(session).remove(key, rev=rev)
        logger.info("Deleted %s %s", self.config.label, key)
