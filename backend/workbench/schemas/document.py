"""
Workbench Backend: Pydantic Request/Response Schemas
=====================================================

What:  Document shapes for the four resources plus the shared response models.
Why:   Request bodies are validated against the declared shape; anything not
       declared is still accepted (extra="allow") and stored as-is, because
       documents are opaque to the handler beyond these few fields.
How:   `_key` is exposed through a `key` field with alias "_key"; pydantic does
       not allow field names that start with an underscore.

Request shapes:
    DatasetDocument, ModelDocument, ExperimentDocument, NotebookDocument

Response shape:
    StoredDocument: `_key`, `_id`, `_rev` plus every stored field. Used for
    all four resources so that documents written before a shape changed can
    still be returned.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from workbench.services.document_store import KEY_PATTERN


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class DocumentBase(BaseModel):
    """Fields every resource document shares."""

    key: Optional[str] = Field(
        default=None,
        alias="_key",
        pattern=KEY_PATTERN,
        description="Document key. Generated by the store when omitted.",
    )
    name: str = Field(min_length=1, description="Human-readable name")
    description: Optional[str] = Field(default=None, description="Free-form description")

    model_config = {"extra": "allow"}

    def to_document(self) -> Dict[str, Any]:
        """Only what the client actually sent, keyed the way the store expects."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class DatasetDocument(DocumentBase):
    """A dataset registered in the workbench."""

    format: Optional[str] = Field(default=None, description="Storage format, e.g. parquet, csv")
    uri: Optional[str] = Field(default=None, description="Where the data lives")
    tags: Optional[List[str]] = Field(default=None, description="Free-form labels")


class ModelDocument(DocumentBase):
    """A trained or registered model."""

    framework: Optional[str] = Field(default=None, description="e.g. pytorch, sklearn")
    version: Optional[str] = Field(default=None, description="Model version label")
    dataset: Optional[str] = Field(default=None, description="Key of the training dataset")


class ExperimentDocument(DocumentBase):
    """One experiment run: which model on which dataset, with what outcome."""

    model: Optional[str] = Field(default=None, description="Key of the model under test")
    dataset: Optional[str] = Field(default=None, description="Key of the evaluation dataset")
    parameters: Optional[Dict[str, Any]] = Field(default=None, description="Run parameters")
    metrics: Optional[Dict[str, Any]] = Field(default=None, description="Recorded metrics")


class NotebookDocument(DocumentBase):
    """A notebook attached to the workbench."""

    language: Optional[str] = Field(default=None, description="Kernel language, e.g. python")
    cells: Optional[List[Any]] = Field(default=None, description="Notebook cells")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class StoredDocument(BaseModel):
    """A document as the store returns it."""

    key: str = Field(alias="_key", description="Document key, unique within its collection")
    id: str = Field(alias="_id", description="Document handle: <collection>/<key>")
    rev: str = Field(alias="_rev", description="Current revision token")

    model_config = {"extra": "allow"}


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "document not found",
            "request_id": "1f0c2a9b"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer health checks."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    collections: Dict[str, bool] = Field(
        default_factory=dict,
        description="Whether each resource collection is provisioned",
    )
    uptime_seconds: float = Field(description="Seconds since service started")
    checked_at: Optional[datetime] = Field(default=None, description="When the check ran (UTC)")
