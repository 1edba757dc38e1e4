"""FastAPI routes for managing snippets."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, Response, status

from ..auth import AuthProvider, AuthSession, Identity
from ..config import AppSettings
from ..errors import SnippetError
from ..store import SnippetStore, create_store
from ..viewmodel import SnippetViewModel
from .model import (
    ImportResponse,
    SnippetCreateRequest,
    SnippetListResponse,
    SnippetResponse,
)
from .service import (
    add_snippet_service,
    delete_snippet_service,
    export_snippets_service,
    import_snippets_service,
    list_snippets_service,
    to_http_exception,
)


def get_settings(request: Request) -> AppSettings:
    settings = getattr(request.app.state, "settings", None)
    if not isinstance(settings, AppSettings):
        raise RuntimeError("API settings have not been initialised")
    return settings


def get_store(
    request: Request,
    settings: AppSettings = Depends(get_settings),
) -> SnippetStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        store = create_store(settings)
        request.app.state.store = store
    return store


def get_identity(
    x_user_id: str | None = Header(None),
    x_user_name: str | None = Header(None),
    x_user_email: str | None = Header(None),
    x_auth_provider: AuthProvider = Header(AuthProvider.GOOGLE),
) -> Identity | None:
    if not x_user_id:
        return None
    return Identity(
        uid=x_user_id,
        display_name=x_user_name,
        email=x_user_email,
        provider=x_auth_provider,
    )


async def get_view_model(
    store: SnippetStore = Depends(get_store),
    identity: Identity | None = Depends(get_identity),
) -> SnippetViewModel:
    view_model = SnippetViewModel(store, auth=AuthSession(identity))
    try:
        await view_model.start()
    except SnippetError as exc:
        raise to_http_exception(exc) from exc
    return view_model


router = APIRouter()


@router.get("/snippets", response_model=SnippetListResponse)
async def list_snippets(
    q: str = Query("", description="Case-insensitive search over title, description and tags"),
    view_model: SnippetViewModel = Depends(get_view_model),
) -> SnippetListResponse:
    return list_snippets_service(view_model, q)


@router.post("/snippets", response_model=SnippetResponse, status_code=status.HTTP_201_CREATED)
async def add_snippet(
    payload: SnippetCreateRequest,
    view_model: SnippetViewModel = Depends(get_view_model),
) -> SnippetResponse:
    return await add_snippet_service(view_model, payload)


@router.get("/snippets/export", response_class=Response)
async def export_snippets(
    view_model: SnippetViewModel = Depends(get_view_model),
) -> Response:
    return export_snippets_service(view_model)


@router.post("/snippets/import", response_model=ImportResponse)
async def import_snippets(
    request: Request,
    view_model: SnippetViewModel = Depends(get_view_model),
) -> ImportResponse:
    data = await request.body()
    if not data:
        raise HTTPException(status_code=400, detail="Import payload is empty")
    return await import_snippets_service(view_model, data)


@router.delete("/snippets/{snippet_id}", response_class=Response)
async def delete_snippet(
    snippet_id: str,
    confirm: bool = Query(False, description="Must be true to delete"),
    view_model: SnippetViewModel = Depends(get_view_model),
) -> Response:
    await delete_snippet_service(view_model, snippet_id, confirm=confirm)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
