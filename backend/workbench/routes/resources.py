"""
Workbench Backend: Resource Route Factory
==========================================

What:  Builds the six CRUD endpoints for one ResourceHandler.
Why:   The four resources share one HTTP contract; the router is generated
       from ResourceConfig instead of being written out four times.
How:   `create_resource_router(handler)` returns an APIRouter mounted at
       `/<name>`. main.py calls it once per entry in workbench.resources.

Endpoints (per resource):
    GET    /<name>          → 200, list of documents
    POST   /<name>          → 201, created document, Location + ETag headers
    GET    /<name>/{key}    → 200, document, ETag header          | 404
    PUT    /<name>/{key}    → 200, replaced document              | 404, 409
    PATCH  /<name>/{key}    → 200, merged document                | 404, 409
    DELETE /<name>/{key}    → 204                                 | 404, 409

Revisions:
    PUT, PATCH and DELETE accept an optional `If-Match: "<_rev>"` header.
    When present, the write only happens if the document's current revision
    matches; otherwise the store reports a conflict (409). `If-Match: *`
    behaves as if the header were absent.

Route handlers stay thin: status codes and headers here, everything else in
ResourceHandler. Errors are rendered by the global handlers in main.py.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Body, Depends, Header, Path, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from workbench.database import get_db_session
from workbench.schemas.document import ErrorResponse, StoredDocument
from workbench.services.resource_handler import ResourceHandler

logger = logging.getLogger(__name__)

KEY_MAX_LENGTH = 254


def revision_from_if_match(value: Optional[str]) -> Optional[str]:
    """
    Extracts the expected revision from an If-Match header value.

    Accepts a bare revision, a quoted entity tag, or a weak tag (W/"...").
    Returns None for a missing header or the wildcard "*".
    """
    if value is None:
        return None
    value = value.strip()
    if value.startswith("W/"):
        value = value[2:]
    value = value.strip('"')
    if not value or value == "*":
        return None
    return value


def _etag(rev: str) -> str:
    return f'"{rev}"'


def create_resource_router(handler: ResourceHandler) -> APIRouter:
    """Returns the CRUD router for `handler`'s resource."""
    config = handler.config
    Document = config.document_model
    label = config.label

    router = APIRouter(prefix=f"/{config.name}", tags=[config.name.capitalize()])

    not_found = {404: {"description": f"The {label} does not exist", "model": ErrorResponse}}
    conflict = {409: {"description": "Concurrent modification or stale If-Match revision",
                      "model": ErrorResponse}}

    @router.get(
        "",
        name=f"{config.name}:list",
        response_model=List[StoredDocument],
        summary=f"List all {config.name}",
        description=f"Retrieves a list of all {config.name}.",
    )
    async def list_documents(
        db: AsyncSession = Depends(get_db_session),
    ) -> List[Dict[str, Any]]:
        return await handler.list(db)

    @router.post(
        "",
        name=f"{config.name}:create",
        status_code=201,
        response_model=StoredDocument,
        responses={
            201: {"description": f"The created {label}"},
            409: {"description": f"The {label} already exists", "model": ErrorResponse},
        },
        summary=f"Create a new {label}",
        description=(
            f"Creates a new {label} from the request body and returns the saved "
            "document. The Location header points at the new document."
        ),
    )
    async def create_document(
        document: Document,
        request: Request,
        response: Response,
        db: AsyncSession = Depends(get_db_session),
    ) -> Dict[str, Any]:
        created = await handler.create(db, document.to_document())
        # Keys may contain "%" and other reserved characters
        response.headers["Location"] = str(
            request.url_for(config.detail_route, key=quote(created["_key"], safe=""))
        )
        response.headers["ETag"] = _etag(created["_rev"])
        return created

    @router.get(
        "/{key}",
        name=config.detail_route,
        response_model=StoredDocument,
        responses={**not_found},
        summary=f"Fetch a {label}",
        description=f"Retrieves a {label} by its key.",
    )
    async def get_document(
        response: Response,
        key: str = Path(min_length=1, max_length=KEY_MAX_LENGTH, description=f"The key of the {label}"),
        db: AsyncSession = Depends(get_db_session),
    ) -> Dict[str, Any]:
        found = await handler.get(db, key)
        response.headers["ETag"] = _etag(found["_rev"])
        return found

    @router.put(
        "/{key}",
        name=f"{config.name}:replace",
        response_model=StoredDocument,
        responses={**not_found, **conflict},
        summary=f"Replace a {label}",
        description=(
            f"Replaces an existing {label} with the request body and returns "
            "the new document."
        ),
    )
    async def replace_document(
        document: Document,
        response: Response,
        key: str = Path(min_length=1, max_length=KEY_MAX_LENGTH, description=f"The key of the {label}"),
        if_match: Optional[str] = Header(default=None, description="Expected current revision"),
        db: AsyncSession = Depends(get_db_session),
    ) -> Dict[str, Any]:
        replaced = await handler.replace(
            db, key, document.to_document(), rev=revision_from_if_match(if_match)
        )
        response.headers["ETag"] = _etag(replaced["_rev"])
        return replaced

    @router.patch(
        "/{key}",
        name=f"{config.name}:update",
        response_model=StoredDocument,
        responses={**not_found, **conflict},
        summary=f"Update a {label}",
        description=(
            f"Patches a {label} with the request body and returns the updated "
            "document. Top-level fields are merged; nested objects are replaced."
        ),
    )
    async def update_document(
        response: Response,
        patch: Dict[str, Any] = Body(description=f"The data to update the {label} with"),
        key: str = Path(min_length=1, max_length=KEY_MAX_LENGTH, description=f"The key of the {label}"),
        if_match: Optional[str] = Header(default=None, description="Expected current revision"),
        db: AsyncSession = Depends(get_db_session),
    ) -> Dict[str, Any]:
        updated = await handler.update(db, key, patch, rev=revision_from_if_match(if_match))
        response.headers["ETag"] = _etag(updated["_rev"])
        return updated

    @router.delete(
        "/{key}",
        name=f"{config.name}:delete",
        status_code=204,
        response_class=Response,
        responses={**not_found, **conflict},
        summary=f"Remove a {label}",
        description=f"Deletes a {label} from the database.",
    )
    async def delete_document(
        key: str = Path(min_length=1, max_length=KEY_MAX_LENGTH, description=f"The key of the {label}"),
        if_match: Optional[str] = Header(default=None, description="Expected current revision"),
        db: AsyncSession = Depends(get_db_session),
    ) -> Response:
        await handler.delete(db, key, rev=revision_from_if_match(if_match))
        return Response(status_code=204)

    return router
