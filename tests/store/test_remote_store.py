from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from bson import ObjectId
from pymongo.errors import PyMongoError

from snippet_manager.errors import NotSignedInError, StoreError
from snippet_manager.snippet import Snippet
from snippet_manager.store import MongoSnippetStore


class _Cursor:
    def __init__(self, documents):
        self._documents = documents

    def sort(self, key, direction):
        self._documents = sorted(
            self._documents, key=lambda doc: doc[key], reverse=direction < 0
        )
        return self

    async def to_list(self, length=None):
        return list(self._documents)


class _FakeCollection:
    def __init__(self, fail=False):
        self.documents = []
        self.fail = fail
        self.find_calls = []

    def find(self, selector):
        if self.fail:
            raise PyMongoError("unavailable")
        self.find_calls.append(selector)
        matches = [
            dict(doc)
            for doc in self.documents
            if all(doc.get(key) == value for key, value in selector.items())
        ]
        return _Cursor(matches)

    async def insert_one(self, document):
        if self.fail:
            raise PyMongoError("unavailable")
        stored = dict(document)
        stored["_id"] = ObjectId()
        self.documents.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    async def delete_one(self, selector):
        if self.fail:
            raise PyMongoError("unavailable")
        for index, doc in enumerate(self.documents):
            if all(doc.get(key) == value for key, value in selector.items()):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


@pytest.mark.asyncio
async def test_query_requires_owner():
    store = MongoSnippetStore(_FakeCollection())

    with pytest.raises(NotSignedInError):
        await store.query(None)


@pytest.mark.asyncio
async def test_create_then_query_newest_first_for_owner():
    collection = _FakeCollection()
    store = MongoSnippetStore(collection)

    older = await store.create(
        Snippet(title="old", code="1", user_id="alice", created=datetime(2024, 1, 1, tzinfo=timezone.utc))
    )
    newer = await store.create(
        Snippet(title="new", code="2", user_id="alice", created=datetime(2024, 6, 1, tzinfo=timezone.utc))
    )
    await store.create(Snippet(title="other", code="3", user_id="bob"))

    snippets = await store.query("alice")

    assert [snippet.title for snippet in snippets] == ["new", "old"]
    assert [snippet.id for snippet in snippets] == [newer.id, older.id]
    assert collection.find_calls[-1] == {"userId": "alice"}
    stored = collection.documents[0]
    assert stored["userId"] == "alice"
    assert "id" not in stored


@pytest.mark.asyncio
async def test_create_without_owner_is_rejected():
    store = MongoSnippetStore(_FakeCollection())

    with pytest.raises(NotSignedInError):
        await store.create(Snippet(title="t", code="c"))


@pytest.mark.asyncio
async def test_delete_by_id_scoped_to_owner():
    collection = _FakeCollection()
    store = MongoSnippetStore(collection)
    created = await store.create(Snippet(title="t", code="c", user_id="alice"))

    assert await store.delete(created.id, owner_id="bob") is False
    assert await store.delete("not-an-object-id", owner_id="alice") is False
    assert await store.delete(created.id, owner_id="alice") is True
    assert await store.delete(created.id, owner_id="alice") is False
    assert collection.documents == []


@pytest.mark.asyncio
async def test_driver_failures_become_store_errors():
    store = MongoSnippetStore(_FakeCollection(fail=True))

    with pytest.raises(StoreError):
        await store.query("alice")
    with pytest.raises(StoreError):
        await store.create(Snippet(title="t", code="c", user_id="alice"))
    with pytest.raises(StoreError):
        await store.delete(str(ObjectId()))
