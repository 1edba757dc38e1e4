"""Service-layer helpers backing the snippet HTTP routes."""

from __future__ import annotations

import logging

from fastapi import HTTPException, Response

from ..errors import (
    MalformedImportError,
    NotSignedInError,
    SnippetError,
    SnippetValidationError,
    StoreError,
)
from ..snippet import EXPORT_FILENAME, EXPORT_MEDIA_TYPE
from ..viewmodel import SnippetViewModel
from .model import (
    ImportResponse,
    SnippetCreateRequest,
    SnippetListResponse,
    SnippetResponse,
)

logger = logging.getLogger("snippet_manager")


def to_http_exception(exc: SnippetError) -> HTTPException:
    """Map a snippet manager failure onto an HTTP error."""
    if isinstance(exc, NotSignedInError):
        return HTTPException(status_code=401, detail=str(exc))
    if isinstance(exc, (SnippetValidationError, MalformedImportError)):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, StoreError):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


def list_snippets_service(
    view_model: SnippetViewModel,
    query: str = "",
) -> SnippetListResponse:
    results = view_model.set_search(query)
    return SnippetListResponse(
        query=query,
        total=len(view_model.snippets),
        results=[SnippetResponse.from_snippet(snippet) for snippet in results],
    )


async def add_snippet_service(
    view_model: SnippetViewModel,
    payload: SnippetCreateRequest,
) -> SnippetResponse:
    try:
        snippet = await view_model.add(payload.to_draft())
    except SnippetError as exc:
        raise to_http_exception(exc) from exc
    return SnippetResponse.from_snippet(snippet)


async def delete_snippet_service(
    view_model: SnippetViewModel,
    snippet_id: str,
    *,
    confirm: bool,
) -> None:
    if not confirm:
        raise HTTPException(
            status_code=400,
            detail="Deletion must be confirmed with confirm=true",
        )
    try:
        removed = await view_model.delete(snippet_id, confirmed=True)
    except SnippetError as exc:
        raise to_http_exception(exc) from exc
    if not removed:
        raise HTTPException(status_code=404, detail="Snippet not found")


def export_snippets_service(view_model: SnippetViewModel) -> Response:
    payload = view_model.export()
    if payload is None:
        raise HTTPException(status_code=404, detail="No snippets to export")
    return Response(
        content=payload,
        media_type=EXPORT_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


async def import_snippets_service(
    view_model: SnippetViewModel,
    data: bytes,
) -> ImportResponse:
    try:
        result = await view_model.import_snippets(data)
    except SnippetError as exc:
        raise to_http_exception(exc) from exc
    return ImportResponse(imported=result.imported, skipped=result.skipped)


__all__ = [
    "add_snippet_service",
    "delete_snippet_service",
    "export_snippets_service",
    "import_snippets_service",
    "list_snippets_service",
    "to_http_exception",
]
