"""
Workbench Backend: Application Package Initializer
===================================================

What: Marks the `workbench` directory as a Python package.
Why:  Enables module imports like `from workbench.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend serves four document resources (datasets, models, experiments,
    notebooks) through one generic handler:

    ┌─────────────────────────────────────┐
    │     Routes (one router factory)     │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   ResourceHandler (x4 instances)    │  ← Store error → HTTP taxonomy
    ├─────────────────────────────────────┤
    │   DocumentStore / DocumentCollection│  ← Keys, revisions, conflicts
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Resources differ only in their ResourceConfig (name, collection, document
    shape); nothing else is duplicated per resource.
"""

__version__ = "1.0.0"
