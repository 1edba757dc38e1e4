"""State and actions behind the snippet manager screens."""

from __future__ import annotations

import logging
from typing import Any, Callable, List

from pydantic import ValidationError

from .auth import AuthSession, Identity
from .errors import (
    MalformedImportError,
    NotSignedInError,
    SnippetValidationError,
    StoreError,
)
from .exception_handler import describe_error
from .snippet import (
    ImportResult,
    Snippet,
    SnippetDraft,
    dump_snippets,
    filter_snippets,
    load_import_payload,
)
from .store import ProgressCallback, SnippetStore

logger = logging.getLogger("snippet_manager")

DELETE_PROMPT = "Are you sure you want to delete this snippet?"

Notifier = Callable[[str], None]
Confirmer = Callable[[str], bool]


def _log_notice(message: str) -> None:
    logger.warning(message)


def _decline(_prompt: str) -> bool:
    return False


class SnippetViewModel:
    """Owns the in-memory collection, the search term and the add-form draft.

    The store is injected; the view-model never reaches for global handles.
    ``notify`` shows a user-facing alert and ``confirm`` answers yes/no
    questions such as the delete confirmation.
    """

    def __init__(
        self,
        store: SnippetStore,
        *,
        auth: AuthSession | None = None,
        notify: Notifier | None = None,
        confirm: Confirmer | None = None,
    ) -> None:
        self.store = store
        self.auth = auth or AuthSession()
        self.notify = notify or _log_notice
        self.confirm = confirm or _decline

        self.snippets: List[Snippet] = []
        self.search_term = ""
        self.draft = SnippetDraft()
        self.form_open = False

    @property
    def visible_snippets(self) -> List[Snippet]:
        return filter_snippets(self.snippets, self.search_term)

    @property
    def is_remote(self) -> bool:
        return self.store.requires_identity

    async def start(self) -> List[Snippet]:
        """Load the collection for the current user."""
        if self.is_remote and not self.auth.is_signed_in:
            self.snippets = []
            return self.snippets
        self.snippets = await self._run(
            self.store.load(self.auth.uid), "Failed to load snippets"
        )
        return self.snippets

    async def sign_in(self, identity: Identity) -> List[Snippet]:
        self.auth.sign_in(identity)
        return await self.start()

    def sign_out(self) -> None:
        self.auth.sign_out()
        if self.is_remote:
            self.snippets = []

    def set_search(self, term: str) -> List[Snippet]:
        self.search_term = term or ""
        return self.visible_snippets

    def open_form(self) -> None:
        self.form_open = True

    def close_form(self) -> None:
        self.form_open = False

    def update_draft(self, **fields: Any) -> SnippetDraft:
        try:
            draft = SnippetDraft.model_validate({**self.draft.model_dump(), **fields})
        except ValidationError as exc:
            invalid = sorted({str(error["loc"][0]) for error in exc.errors() if error["loc"]})
            message = "Invalid value for " + " and ".join(invalid or ["draft"])
            self.notify(message)
            raise SnippetValidationError(message) from exc
        self.draft = draft
        return self.draft

    def reset_draft(self) -> None:
        self.draft = SnippetDraft()

    async def add(self, draft: SnippetDraft | None = None) -> Snippet:
        """Validate the draft, store it and close the form."""
        draft = draft or self.draft

        missing = draft.missing_fields()
        if missing:
            message = "Please fill in the " + " and ".join(missing)
            self.notify(message)
            raise SnippetValidationError(message)

        user_id = None
        if self.is_remote:
            user_id = self._require_identity().uid

        snippet = draft.to_snippet(user_id=user_id)
        stored = await self._run(self.store.create(snippet), "Failed to save snippet")

        if self.store.newest_first:
            self.snippets = [stored, *self.snippets]
        else:
            self.snippets = [*self.snippets, stored]

        self.reset_draft()
        self.close_form()
        logger.info("Added snippet %s (%s)", stored.id, stored.title)
        return stored

    async def delete(self, snippet_id: str, *, confirmed: bool = False) -> bool:
        """Delete a snippet once the user has confirmed it.

        Returns ``True`` when a record was removed.
        """
        if not confirmed and not self.confirm(DELETE_PROMPT):
            return False

        owner_id = None
        if self.is_remote:
            owner_id = self._require_identity().uid

        removed = await self._run(
            self.store.delete(snippet_id, owner_id=owner_id),
            "Failed to delete snippet",
        )
        if not removed:
            if self.is_remote:
                self.notify("Snippet not found")
            logger.info("Delete ignored for unknown snippet %s", snippet_id)
            return False

        self.snippets = [snippet for snippet in self.snippets if snippet.id != snippet_id]
        return True

    def export(self) -> bytes | None:
        """Serialized collection for download, or ``None`` when nothing to export."""
        if self.is_remote and not self.snippets:
            self.notify("No snippets to export")
            return None
        return dump_snippets(self.snippets)

    async def import_snippets(
        self,
        data: bytes | str,
        *,
        progress: ProgressCallback | None = None,
    ) -> ImportResult:
        """Re-create every well-formed entry of ``data`` as a new snippet."""
        user_id = None
        if self.is_remote:
            user_id = self._require_identity().uid

        try:
            result = load_import_payload(data)
        except MalformedImportError as exc:
            self.notify(describe_error(exc))
            raise

        records = [entry.to_snippet(user_id=user_id) for entry in result.entries]
        if not records:
            return result

        try:
            created = await self.store.create_many(records, progress=progress)
        except StoreError as exc:
            logger.exception("Import stopped after a store failure")
            self.notify(describe_error(exc))
            if self.is_remote:
                await self._reload_quietly()
            raise

        result.imported = len(created)
        if self.is_remote:
            self.snippets = await self._run(
                self.store.load(user_id), "Failed to load snippets"
            )
        else:
            self.snippets = [*self.snippets, *created]

        logger.info(
            "Imported %d snippet(s), skipped %d", result.imported, result.skipped
        )
        return result

    def _require_identity(self) -> Identity:
        try:
            return self.auth.require()
        except NotSignedInError as exc:
            self.notify(describe_error(exc))
            raise

    async def _run(self, operation, failure: str):
        try:
            return await operation
        except StoreError as exc:
            logger.exception(failure)
            self.notify(f"{failure}: {describe_error(exc)}")
            raise

    async def _reload_quietly(self) -> None:
        # Earlier creates are committed; show them.
        try:
            self.snippets = await self.store.load(self.auth.uid)
        except StoreError:
            logger.exception("Failed to reload snippets after partial import")


__all__ = ["DELETE_PROMPT", "SnippetViewModel"]
