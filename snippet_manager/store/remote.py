"""MongoDB-backed snippet store partitioned by owner."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pydantic import ValidationError
from pymongo import ASCENDING, DESCENDING, IndexModel
from pymongo.errors import PyMongoError

from ..errors import NotSignedInError, StoreError
from ..snippet import Snippet
from .base import SnippetStore

logger = logging.getLogger("snippet_manager")


class MongoSnippetStore(SnippetStore):
    """Store each snippet as its own document keyed by ``userId``."""

    requires_identity = True
    newest_first = True

    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        *,
        client: AsyncIOMotorClient | None = None,
    ) -> None:
        self.collection = collection
        self._client = client

    @classmethod
    def from_url(
        cls,
        mongo_url: str,
        *,
        database: str = "code_snippets",
        collection: str = "snippets",
    ) -> "MongoSnippetStore":
        client = AsyncIOMotorClient(mongo_url)
        return cls(client[database][collection], client=client)

    async def ensure_indexes(self) -> None:
        try:
            await self.collection.create_indexes(
                [
                    IndexModel(
                        [("userId", ASCENDING), ("created", DESCENDING)],
                        name="user_created",
                    )
                ]
            )
        except PyMongoError as exc:
            logger.exception("Failed to create snippet indexes")
            raise StoreError(f"Failed to create indexes: {exc}") from exc

    async def load(self, owner_id: str | None = None) -> List[Snippet]:
        return await self.query(owner_id)

    async def query(self, owner_id: str | None) -> List[Snippet]:
        """Return every snippet owned by ``owner_id``, newest first."""
        if not owner_id:
            raise NotSignedInError()

        try:
            cursor = self.collection.find({"userId": owner_id}).sort("created", DESCENDING)
            documents = await cursor.to_list(length=None)
        except PyMongoError as exc:
            logger.exception("Failed to query snippets for %s", owner_id)
            raise StoreError(f"Failed to load snippets: {exc}") from exc

        snippets: List[Snippet] = []
        for document in documents:
            snippet = self._from_document(document)
            if snippet is not None:
                snippets.append(snippet)
        return snippets

    async def create(self, snippet: Snippet) -> Snippet:
        if not snippet.user_id:
            raise NotSignedInError()

        document = self._to_document(snippet)
        try:
            result = await self.collection.insert_one(document)
        except PyMongoError as exc:
            logger.exception("Failed to create snippet %r", snippet.title)
            raise StoreError(f"Failed to save snippet: {exc}") from exc

        return snippet.model_copy(update={"id": str(result.inserted_id)})

    async def delete(self, snippet_id: str, owner_id: str | None = None) -> bool:
        try:
            object_id = ObjectId(snippet_id)
        except (InvalidId, TypeError):
            logger.debug("Ignoring delete for invalid snippet id %r", snippet_id)
            return False

        try:
            selector: Dict[str, Any] = {"_id": object_id}
            if owner_id:
                selector["userId"] = owner_id
            result = await self.collection.delete_one(selector)
        except PyMongoError as exc:
            logger.exception("Failed to delete snippet %s", snippet_id)
            raise StoreError(f"Failed to delete snippet: {exc}") from exc

        return bool(result.deleted_count)

    async def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    @staticmethod
    def _to_document(snippet: Snippet) -> Dict[str, Any]:
        return snippet.model_dump(by_alias=True, exclude={"id"})

    @staticmethod
    def _from_document(document: Dict[str, Any]) -> Snippet | None:
        data = dict(document)
        data["id"] = str(data.pop("_id", "")) or None
        try:
            return Snippet.model_validate(data)
        except ValidationError:
            logger.warning("Skipping malformed snippet document %s", data.get("id"))
            return None


__all__ = ["MongoSnippetStore"]
