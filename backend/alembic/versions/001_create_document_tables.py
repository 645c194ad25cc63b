"""Create collections and documents tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the two tables behind the document store.
       collections: registry of provisioned collection names
       documents:   every document of every collection, keyed by (collection, key)

Rollback: downgrade() drops both tables (destructive, all documents lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "collections",
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("name"),
    )

    op.create_table(
        "documents",
        sa.Column("collection", sa.String(256), nullable=False),
        sa.Column("key", sa.String(254), nullable=False),
        # Revision token; doubles as the ORM version counter
        sa.Column("rev", sa.String(32), nullable=False),
        # User fields only; _key/_id/_rev are derived from the columns
        sa.Column(
            "data",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ["collection"], ["collections.name"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("collection", "key"),
    )

    # List operations scan one collection at a time
    op.create_index("idx_documents_collection", "documents", ["collection"])


def downgrade() -> None:
    op.drop_index("idx_documents_collection", table_name="documents")
    op.drop_table("documents")
    op.drop_table("collections")
