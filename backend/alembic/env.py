"""
Workbench Backend: Alembic Environment
=======================================

What:  Runs migrations for the document store tables (collections, documents).
How:   The database URL always comes from workbench.config.settings, never from
       alembic.ini, so migrations hit the same database as the server and
       the provisioning scripts. Online runs use a throwaway async engine and
       bridge into Alembic's sync API with run_sync().

SQLite:
    ALTER TABLE support is limited, so autogenerated migrations are rendered
    in batch mode ("move and copy") whenever the target is SQLite.

Typical flow:
    alembic upgrade head                  # create/upgrade tables
    python -m workbench.scripts.setup     # provision the resource collections
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from workbench.config import settings
from workbench.database import Base
import workbench.models  # noqa: F401  (registers CollectionRecord, DocumentRecord)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure(**options) -> None:
    context.configure(
        target_metadata=target_metadata,
        render_as_batch=settings.is_sqlite,
        # JSON -> JSONB or String length changes should show up in autogenerate
        compare_type=True,
        **options,
    )


def run_migrations_offline() -> None:
    """`alembic upgrade head --sql`: print the DDL instead of executing it."""
    _configure(
        url=settings.database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_on_connection(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    # No pooling: the engine lives for exactly one migration run
    engine = create_async_engine(settings.database_url, poolclass=NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_on_connection)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
