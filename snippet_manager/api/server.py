"""FastAPI application factory for the snippets service."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from ..config import AppSettings
from ..exception_handler import configure_logging
from ..mcpserver import ServiceContext, create_server
from ..store import MongoSnippetStore
from .route import router


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or AppSettings.from_env()
    configure_logging(settings.log_level)

    # setup mcp
    services = ServiceContext(settings)
    mcp_app = create_server(services).http_app("/")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = services.store()
        if isinstance(store, MongoSnippetStore):
            await store.ensure_indexes()
        app.state.store = store
        async with mcp_app.lifespan(app):
            yield
        await store.close()

    app = FastAPI(
        title="Code Snippet Manager API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.include_router(router)

    # mount mcp
    app.mount("/mcp", mcp_app)

    return app


app = create_app()


__all__ = ["app", "create_app"]
