"""Whole-collection persistence in a single key-value slot."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, List, Protocol, Sequence

import redis
from pydantic import ValidationError

from ..config import DEFAULT_STORAGE_KEY
from ..errors import StoreError
from ..snippet import Snippet
from .base import ProgressCallback, SnippetStore

logger = logging.getLogger("snippet_manager")


class KeyValueSlot(Protocol):
    """One named text value that survives restarts."""

    def read(self) -> str | None: ...

    def write(self, value: str) -> None: ...


class FileSlot:
    """Slot stored as a file on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def read(self) -> str | None:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StoreError(f"Failed to read {self.path}: {exc}") from exc

    def write(self, value: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(value, encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Failed to write {self.path}: {exc}") from exc


class RedisSlot:
    """Slot stored under a single Redis key."""

    def __init__(self, redis_client: redis.Redis, key: str = DEFAULT_STORAGE_KEY) -> None:
        self.redis = redis_client
        self.key = key

    def read(self) -> str | None:
        try:
            raw = self.redis.get(self.key)
        except redis.RedisError as exc:
            raise StoreError(f"Failed to read snippets from Redis: {exc}") from exc
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return raw

    def write(self, value: str) -> None:
        try:
            self.redis.set(self.key, value)
        except redis.RedisError as exc:
            raise StoreError(f"Failed to write snippets to Redis: {exc}") from exc


class LocalSnippetStore(SnippetStore):
    """Keep the whole collection in one slot, rewritten after every change."""

    requires_identity = False
    newest_first = False

    def __init__(self, slot: KeyValueSlot) -> None:
        self.slot = slot
        self._snippets: List[Snippet] | None = None

    async def load(self, owner_id: str | None = None) -> List[Snippet]:
        self._snippets = self._read_collection()
        return list(self._snippets)

    async def create(self, snippet: Snippet) -> Snippet:
        collection = self._collection()
        stored = self._assign_id(snippet, collection)
        self.save_all([*collection, stored])
        return stored

    async def delete(self, snippet_id: str, owner_id: str | None = None) -> bool:
        collection = self._collection()
        remaining = [snippet for snippet in collection if snippet.id != snippet_id]
        if len(remaining) == len(collection):
            logger.debug("Snippet %s not found in local store", snippet_id)
            return False
        self.save_all(remaining)
        return True

    async def create_many(
        self,
        snippets: Sequence[Snippet],
        progress: ProgressCallback | None = None,
    ) -> List[Snippet]:
        collection = list(self._collection())
        created: List[Snippet] = []
        total = len(snippets)
        for snippet in snippets:
            stored = self._assign_id(snippet, collection)
            collection.append(stored)
            created.append(stored)
            if progress is not None:
                progress(len(created), total)
        if created:
            self.save_all(collection)
        return created

    def save_all(self, snippets: Sequence[Snippet]) -> None:
        """Replace the slot contents with ``snippets``."""
        payload = json.dumps([snippet.to_document() for snippet in snippets])
        self.slot.write(payload)
        self._snippets = list(snippets)

    def _collection(self) -> List[Snippet]:
        if self._snippets is None:
            self._snippets = self._read_collection()
        return self._snippets

    def _read_collection(self) -> List[Snippet]:
        raw = self.slot.read()
        if not raw:
            return []
        try:
            data: Any = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Saved snippets are not valid JSON; starting empty")
            return []
        if not isinstance(data, list):
            logger.warning("Saved snippets are not a JSON array; starting empty")
            return []

        snippets: List[Snippet] = []
        for index, item in enumerate(data):
            try:
                snippets.append(Snippet.model_validate(item))
            except ValidationError:
                logger.warning("Ignoring malformed saved snippet at index %d", index)
        return snippets

    @staticmethod
    def _assign_id(snippet: Snippet, collection: Sequence[Snippet]) -> Snippet:
        taken = {existing.id for existing in collection}
        candidate = int(time.time() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return snippet.model_copy(update={"id": str(candidate), "user_id": None})


__all__ = ["FileSlot", "KeyValueSlot", "LocalSnippetStore", "RedisSlot"]
