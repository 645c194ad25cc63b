"""
Provisioning entry points.

    python -m workbench.scripts.setup      # create missing collections
    python -m workbench.scripts.teardown   # drop collections and their documents

Both operate on the database named by DATABASE_URL and the collection names
derived from COLLECTION_PREFIX. The tables themselves are created by Alembic
(`alembic upgrade head`).
"""
