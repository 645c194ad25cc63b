"""
Workbench Backend: Document Store Tables
=========================================

What:  ORM models backing the document store: a registry of provisioned
       collections and one shared table holding every document.
Why:   A collection is a logical namespace, not a table. Provisioning and
       teardown become row operations and need no DDL at runtime.
Who:   Used by DocumentStore / DocumentCollection and by Alembic.

Table Design:
    collections(name PK, created_at)
    documents(collection, key, rev, data, created_at, updated_at)
        PRIMARY KEY (collection, key)  → key is unique per collection
        rev is SQLAlchemy's version counter: every UPDATE/DELETE carries
        "WHERE rev = :loaded_rev" and a zero row count surfaces as
        StaleDataError, which the store reports as a write-write conflict.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from workbench.database import Base


def new_revision(_previous: Any = None) -> str:
    """Returns a fresh opaque revision token."""
    return uuid.uuid4().hex[:16]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CollectionRecord(Base):
    """A provisioned collection. Documents may only live in registered collections."""

    __tablename__ = "collections"

    name: Mapped[str] = mapped_column(String(256), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<CollectionRecord(name='{self.name}')>"


class DocumentRecord(Base):
    """
    One stored document.

    `data` holds only user fields; the system attributes `_key`, `_id` and
    `_rev` are derived from the columns when the document is materialized.
    """

    __tablename__ = "documents"

    collection: Mapped[str] = mapped_column(
        String(256),
        ForeignKey("collections.name", ondelete="CASCADE"),
        primary_key=True,
    )
    key: Mapped[str] = mapped_column(String(254), primary_key=True)
    rev: Mapped[str] = mapped_column(String(32), nullable=False)
    data: Mapped[Dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=dict,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    # Touched on every write so that a replace with identical data still
    # emits an UPDATE and therefore a new revision.
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_documents_collection", "collection"),
    )

    __mapper_args__ = {
        "version_id_col": rev,
        "version_id_generator": new_revision,
    }

    def __repr__(self) -> str:
        return (
            f"<DocumentRecord(collection='{self.collection}', key='{self.key}', "
            f"rev='{self.rev}')>"
        )
