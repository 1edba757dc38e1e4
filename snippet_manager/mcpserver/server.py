"""FastMCP server exposing snippet search and capture as MCP tools."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from ..auth import AuthSession, Identity
from ..config import AppSettings
from ..errors import SnippetError
from ..exception_handler import describe_error
from ..snippet import Language, SnippetDraft
from ..store import SnippetStore, create_store
from ..viewmodel import SnippetViewModel

logger = logging.getLogger("snippet_manager")


class ServiceContext:
    """Lazy dependency container for MCP tool handlers."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        store: SnippetStore | None = None,
    ) -> None:
        self._settings = settings
        self._store = store

    @property
    def settings(self) -> AppSettings:
        if self._settings is None:
            self._settings = AppSettings.from_env()
        return self._settings

    def store(self) -> SnippetStore:
        if self._store is None:
            self._store = create_store(self.settings)
        return self._store

    async def view_model(self, user_id: str | None) -> SnippetViewModel:
        identity = Identity(uid=user_id) if user_id else None
        view_model = SnippetViewModel(self.store(), auth=AuthSession(identity))
        await view_model.start()
        return view_model


def _tool_error(exc: Exception, *, default_message: str) -> ToolError:
    if not isinstance(exc, SnippetError):
        logger.exception(default_message)
    return ToolError(f"{default_message}: {describe_error(exc)}")


def create_server(services: ServiceContext | None = None) -> FastMCP:
    """Create a FastMCP server wired to the snippet store."""

    services = services or ServiceContext()
    server = FastMCP("Snippets MCP Server")

    @server.tool(
        name="search",
        description=(
            "Search stored snippets by a case-insensitive substring of their title,"
            " description or tags. An empty query lists every snippet. Pass `user_id`"
            " when the server stores snippets per user."
        ),
        tags={"snippets", "search"},
    )
    async def search(query: str = "", user_id: str | None = None) -> Dict[str, Any]:
        """Return snippets matching the query."""
        try:
            view_model = await services.view_model(user_id)
        except Exception as exc:
            raise _tool_error(exc, default_message="Snippet search failed")

        results: List[Dict[str, Any]] = [
            snippet.model_dump(mode="json", exclude={"user_id"})
            for snippet in view_model.set_search(query)
        ]
        return {"query": query, "results": results}

    @server.tool(
        name="add_snippet",
        description=(
            "Store a new code snippet. `title` and `code` are required; `tags` is a"
            " comma-separated list; `language` is one of javascript, python, java,"
            " cpp, ruby or other."
        ),
        tags={"snippets"},
    )
    async def add_snippet(
        title: str,
        code: str,
        description: str = "",
        tags: str = "",
        language: str = Language.JAVASCRIPT.value,
        user_id: str | None = None,
    ) -> Dict[str, Any]:
        """Save a snippet and return the stored record."""
        try:
            resolved_language = Language(language.strip().lower())
        except ValueError:
            raise ToolError(f"Unsupported language: {language}")

        draft = SnippetDraft(
            title=title,
            description=description,
            code=code,
            tags=tags,
            language=resolved_language,
        )
        try:
            view_model = await services.view_model(user_id)
            snippet = await view_model.add(draft)
        except Exception as exc:
            raise _tool_error(exc, default_message="Failed to add snippet")

        return snippet.model_dump(mode="json", exclude={"user_id"})

    return server


mcp = create_server()

__all__ = ["ServiceContext", "create_server", "mcp"]
