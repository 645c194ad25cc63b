"""SQLAlchemy models. Imported here so Base.metadata sees every table."""

from workbench.models.document import CollectionRecord, DocumentRecord

__all__ = ["CollectionRecord", "DocumentRecord"]
