"""
Workbench Backend: Exception Hierarchy
=======================================

What:  Defines the two error layers of the service.
How:   The document store raises DocumentStoreError carrying a numeric
       StoreErrorCode. The resource handler rewrites exactly three of those
       codes into application errors; global exception handlers (registered
       in main.py) turn application errors into JSON responses.

Exception Hierarchy:
    DocumentStoreError (store layer, numeric code)
        DOCUMENT_NOT_FOUND          → NotFoundError
        UNIQUE_CONSTRAINT_VIOLATED  → ConflictError
        CONFLICT                    → ConflictError
        anything else               → propagated unchanged (500)

    WorkbenchError (base)
    └── DocumentError        (adds resource/key to context)
        ├── NotFoundError   → 404 Not Found
        └── ConflictError   → 409 Conflict

Error codes follow the ArangoDB numbering so that messages and codes stay
recognizable to clients that talked to the previous backend.
"""

from enum import IntEnum
from typing import Any, Dict, Optional


class StoreErrorCode(IntEnum):
    """Low-level document store error codes."""

    CONFLICT = 1200
    DOCUMENT_NOT_FOUND = 1202
    COLLECTION_NOT_FOUND = 1203
    DUPLICATE_NAME = 1207
    ILLEGAL_NAME = 1208
    UNIQUE_CONSTRAINT_VIOLATED = 1210
    DOCUMENT_KEY_BAD = 1221


class DocumentStoreError(Exception):
    """
    Raised by the document store for every failed collection operation.

    Attributes:
        code:     StoreErrorCode identifying the failure
        message:  Store-provided description, surfaced to clients unchanged
                  when the code is mapped
    """

    def __init__(self, code: StoreErrorCode, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{int(code)}] {message}")


class WorkbenchError(Exception):
    """
    Base exception for all Workbench application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Structured details (resource, key, store_code) returned as
                  the "details" field of the error body
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class DocumentError(WorkbenchError):
    """
    An error about one document of one resource.

    `resource` and `key` are kept as attributes and copied into `context`,
    so they reach the "details" of the error body.
    """

    default_message = "document error"

    def __init__(
        self,
        message: Optional[str] = None,
        resource: Optional[str] = None,
        key: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if resource:
            ctx["resource"] = resource
        if key:
            ctx["key"] = key
        super().__init__(message=message or self.default_message, context=ctx)
        self.resource = resource
        self.key = key


class NotFoundError(DocumentError):
    """
    Raised when an operation references a key absent from its collection.

    HTTP: 404 Not Found
    """

    default_message = "document not found"


class ConflictError(DocumentError):
    """
    Raised on a duplicate key at creation or a concurrent modification on write.

    HTTP: 409 Conflict

    Note:
        Without an If-Match header, "conflict" on replace/update/delete only
        means the store saw the document change between read and write. With
        If-Match it also covers a caller-supplied revision that is out of date.
    """

    default_message = "conflict"
