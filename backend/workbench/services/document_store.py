"""
Workbench Backend: Document Store
==================================

What:  A small document database over async SQLAlchemy: named collections of
       schemaless JSON documents addressed by `_key`, versioned by `_rev`.
Why:   Resource handlers need per-collection all/save/document/replace/
       update/remove with store-level duplicate and write-conflict detection,
       reported through one numeric error taxonomy (StoreErrorCode).
How:   Every operation runs on the caller's AsyncSession. Nothing is cached
       between calls; the session's transaction is committed or rolled back
       by whoever owns it (get_db_session for HTTP requests).

Conflict detection:
    DocumentRecord.rev is the mapper's version_id_col. SQLAlchemy adds
    "AND rev = :loaded_rev" to every UPDATE/DELETE and raises StaleDataError
    when no row matched, i.e. another writer got there first. That, plus an
    optional caller-supplied expected revision, is the only source of
    CONFLICT errors.

Document layout returned to callers:
    {"_key": "...", "_id": "<collection>/<_key>", "_rev": "...", **user_fields}
"""

import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from workbench.exceptions import DocumentStoreError, StoreErrorCode
from workbench.models.document import CollectionRecord, DocumentRecord

logger = logging.getLogger(__name__)

Document = Dict[str, Any]

# Same alphabet and length limit ArangoDB applies to document keys
KEY_PATTERN = r"^[A-Za-z0-9_\-:.@()+,=;$!*'%]{1,254}$"
COLLECTION_NAME_PATTERN = r"^[A-Za-z_][A-Za-z0-9_\-]{0,255}$"

_KEY_RE = re.compile(KEY_PATTERN)
_COLLECTION_NAME_RE = re.compile(COLLECTION_NAME_PATTERN)

# System attributes are derived from columns; never stored in `data`
SYSTEM_ATTRIBUTES = frozenset({"_key", "_id", "_rev", "_oldRev"})


def generate_key() -> str:
    return uuid.uuid4().hex


def user_fields(doc: Mapping[str, Any]) -> Document:
    """Strips system attributes from a client-supplied document."""
    return {name: value for name, value in doc.items() if name not in SYSTEM_ATTRIBUTES}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentCollection:
    """
    Operations on one collection, bound to one session.

    Every method first checks that the collection has been provisioned and
    raises COLLECTION_NOT_FOUND otherwise.
    """

    def __init__(self, session: AsyncSession, name: str):
        self._session = session
        self.name = name

    # ── Public operations ─────────────────────────────────────────────────

    async def all(self) -> List[Document]:
        """Returns every document of the collection, in no particular order."""
        await self._require_collection()
        result = await self._session.execute(
            select(DocumentRecord).where(DocumentRecord.collection == self.name)
        )
        return [self._materialize(record) for record in result.scalars().all()]

    async def save(self, doc: Mapping[str, Any]) -> Document:
        """
        Inserts a new document.

        `_key` is taken from the document when present, otherwise generated.

        Raises:
            DOCUMENT_KEY_BAD: `_key` is not a valid key
            UNIQUE_CONSTRAINT_VIOLATED: `_key` already exists
        """
        await self._require_collection()
        key = doc.get("_key")
        if key is None:
            key = generate_key()
        elif not isinstance(key, str) or not _KEY_RE.match(key):
            raise DocumentStoreError(StoreErrorCode.DOCUMENT_KEY_BAD, "illegal document key")

        if await self._session.get(DocumentRecord, (self.name, key)) is not None:
            raise self._duplicate(key)

        record = DocumentRecord(collection=self.name, key=key, data=user_fields(doc))
        self._session.add(record)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            # Lost the race against a concurrent insert of the same key
            raise self._duplicate(key) from exc

        logger.debug("Saved %s/%s rev=%s", self.name, key, record.rev)
        return self._materialize(record)

    async def document(self, key: str) -> Document:
        """Raises DOCUMENT_NOT_FOUND when the key is absent."""
        await self._require_collection()
        record = await self._load(key)
        return self._materialize(record)

    async def replace(
        self,
        key: str,
        doc: Mapping[str, Any],
        rev: Optional[str] = None,
    ) -> Document:
        """
        Replaces all user fields of a document.

        Args:
            rev: expected current revision; a mismatch raises CONFLICT
        """
        await self._require_collection()
        record = await self._load(key)
        self._check_revision(record, rev)
        record.data = user_fields(doc)
        record.updated_at = _utcnow()
        await self._flush_write(key)
        return self._materialize(record)

    async def update(
        self,
        key: str,
        partial: Mapping[str, Any],
        rev: Optional[str] = None,
    ) -> Document:
        """
        Shallow-merges `partial` onto a document and returns the result.

        Top-level fields in `partial` overwrite, all others are kept. Nested
        objects are replaced wholesale, not merged.
        """
        await self._require_collection()
        record = await self._load(key)
        self._check_revision(record, rev)
        # New dict so the JSON column registers the change
        record.data = {**record.data, **user_fields(partial)}
        record.updated_at = _utcnow()
        await self._flush_write(key)
        return self._materialize(record)

    async def remove(self, key: str, rev: Optional[str] = None) -> None:
        await self._require_collection()
        record = await self._load(key)
        self._check_revision(record, rev)
        await self._session.delete(record)
        await self._flush_write(key)
        logger.debug("Removed %s/%s", self.name, key)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _require_collection(self) -> None:
        if await self._session.get(CollectionRecord, self.name) is None:
            raise DocumentStoreError(
                StoreErrorCode.COLLECTION_NOT_FOUND,
                f"collection or view not found: {self.name}",
            )

    async def _load(self, key: str) -> DocumentRecord:
        record = await self._session.get(DocumentRecord, (self.name, key))
        if record is None:
            raise DocumentStoreError(StoreErrorCode.DOCUMENT_NOT_FOUND, "document not found")
        return record

    @staticmethod
    def _check_revision(record: DocumentRecord, rev: Optional[str]) -> None:
        if rev is not None and rev != record.rev:
            raise DocumentStoreError(
                StoreErrorCode.CONFLICT, "conflict, _rev values do not match"
            )

    async def _flush_write(self, key: str) -> None:
        try:
            await self._session.flush()
        except StaleDataError as exc:
            logger.info("Write-write conflict on %s/%s", self.name, key)
            raise DocumentStoreError(StoreErrorCode.CONFLICT, "write-write conflict") from exc

    def _duplicate(self, key: str) -> DocumentStoreError:
        return DocumentStoreError(
            StoreErrorCode.UNIQUE_CONSTRAINT_VIOLATED,
            "unique constraint violated - in index primary of type primary over '_key'; "
            f"conflicting key: {key}",
        )

    def _materialize(self, record: DocumentRecord) -> Document:
        doc: Document = {
            "_key": record.key,
            "_id": f"{self.name}/{record.key}",
            "_rev": record.rev,
        }
        doc.update(record.data or {})
        return doc


class DocumentStore:
    """
    Entry point to the store for one session: collection handles plus the
    provisioning primitives (create/drop whole collections).
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    def collection(self, name: str) -> DocumentCollection:
        return DocumentCollection(self._session, name)

    async def has_collection(self, name: str) -> bool:
        return await self._session.get(CollectionRecord, name) is not None

    async def collections(self) -> List[str]:
        result = await self._session.execute(
            select(CollectionRecord.name).order_by(CollectionRecord.name)
        )
        return list(result.scalars().all())

    async def create_collection(self, name: str) -> None:
        """
        Raises:
            ILLEGAL_NAME: name is not a valid collection name
            DUPLICATE_NAME: collection already exists
        """
        if not _COLLECTION_NAME_RE.match(name):
            raise DocumentStoreError(StoreErrorCode.ILLEGAL_NAME, f"illegal name: {name}")
        if await self.has_collection(name):
            raise DocumentStoreError(StoreErrorCode.DUPLICATE_NAME, f"duplicate name: {name}")
        self._session.add(CollectionRecord(name=name))
        await self._session.flush()
        logger.info("Created collection %s", name)

    async def drop_collection(self, name: str) -> int:
        """
        Removes a collection and all of its documents.

        Returns:
            Number of documents removed

        Raises:
            COLLECTION_NOT_FOUND: collection does not exist
        """
        record = await self._session.get(CollectionRecord, name)
        if record is None:
            raise DocumentStoreError(
                StoreErrorCode.COLLECTION_NOT_FOUND,
                f"collection or view not found: {name}",
            )
        result = await self._session.execute(
            delete(DocumentRecord)
            .where(DocumentRecord.collection == name)
            .execution_options(synchronize_session=False)
        )
        await self._session.delete(record)
        await self._session.flush()
        removed = result.rowcount or 0
        logger.info("Dropped collection %s (%d documents)", name, removed)
        return removed
