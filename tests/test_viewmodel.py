import json
from types import SimpleNamespace

import pytest
from bson import ObjectId

from snippet_manager.auth import AuthSession, Identity
from snippet_manager.errors import (
    MalformedImportError,
    NotSignedInError,
    SnippetValidationError,
    StoreError,
)
from snippet_manager.snippet import Language, Snippet, SnippetDraft
from snippet_manager.store import LocalSnippetStore, MongoSnippetStore, SnippetStore
from snippet_manager.viewmodel import DELETE_PROMPT, SnippetViewModel


class _MemorySlot:
    def __init__(self, value=None):
        self.value = value

    def read(self):
        return self.value

    def write(self, value):
        self.value = value


class _Cursor:
    def __init__(self, documents):
        self._documents = documents

    def sort(self, key, direction):
        self._documents = sorted(self._documents, key=lambda doc: doc[key], reverse=direction < 0)
        return self

    async def to_list(self, length=None):
        return list(self._documents)


class _FakeCollection:
    def __init__(self, fail_after=None):
        self.documents = []
        self.fail_after = fail_after

    def find(self, selector):
        return _Cursor([dict(doc) for doc in self.documents if doc.get("userId") == selector["userId"]])

    async def insert_one(self, document):
        if self.fail_after is not None and len(self.documents) >= self.fail_after:
            from pymongo.errors import AutoReconnect

            raise AutoReconnect("connection lost")
        stored = dict(document, _id=ObjectId())
        self.documents.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    async def delete_one(self, selector):
        for index, doc in enumerate(self.documents):
            if all(doc.get(key) == value for key, value in selector.items()):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class _BrokenStore(SnippetStore):
    def __init__(self, snippets):
        self.snippets = snippets

    async def load(self, owner_id=None):
        return list(self.snippets)

    async def create(self, snippet):
        raise StoreError("service unavailable")

    async def delete(self, snippet_id, owner_id=None):
        raise StoreError("service unavailable")


class _Alerts(list):
    def __call__(self, message):
        self.append(message)


SORT_DRAFT = SnippetDraft(
    title="Sort",
    description="",
    code="def s(a): return sorted(a)",
    tags="python, algo",
    language=Language.PYTHON,
)


def _local_view_model(**kwargs):
    return SnippetViewModel(LocalSnippetStore(_MemorySlot()), **kwargs)


def _remote_view_model(collection=None, *, uid="alice", **kwargs):
    identity = Identity(uid=uid) if uid else None
    store = MongoSnippetStore(collection or _FakeCollection())
    return SnippetViewModel(store, auth=AuthSession(identity), **kwargs)


@pytest.mark.asyncio
async def test_add_sort_snippet_and_search():
    view_model = _local_view_model()
    await view_model.start()

    snippet = await view_model.add(SORT_DRAFT)

    assert len(view_model.visible_snippets) == 1
    assert snippet.tags == ["python", "algo"]
    assert snippet.language == "python"
    assert [s.id for s in view_model.set_search("algo")] == [snippet.id]
    assert view_model.set_search("rust") == []


@pytest.mark.asyncio
async def test_add_uses_form_draft_then_resets_it():
    view_model = _local_view_model()
    await view_model.start()
    view_model.open_form()
    view_model.update_draft(title="Hello", code="print('hi')", tags=" a, ,b ")

    await view_model.add()

    assert view_model.form_open is False
    assert view_model.draft == SnippetDraft()
    assert view_model.snippets[0].tags == ["a", "b"]


@pytest.mark.asyncio
async def test_add_rejects_missing_title_or_code():
    alerts = _Alerts()
    view_model = _local_view_model(notify=alerts)
    await view_model.start()
    view_model.open_form()

    with pytest.raises(SnippetValidationError):
        await view_model.add(SnippetDraft(title="", code="x"))
    with pytest.raises(SnippetValidationError):
        await view_model.add(SnippetDraft(title="t", code=""))

    assert view_model.snippets == []
    assert view_model.form_open is True
    assert len(alerts) == 2


@pytest.mark.asyncio
async def test_update_draft_rejects_invalid_values_and_keeps_draft():
    alerts = _Alerts()
    view_model = _local_view_model(notify=alerts)
    await view_model.start()
    view_model.update_draft(title="Hello", code="x")

    with pytest.raises(SnippetValidationError):
        view_model.update_draft(language="rust")
    with pytest.raises(SnippetValidationError):
        view_model.update_draft(title=None)

    assert view_model.draft == SnippetDraft(title="Hello", code="x")
    assert alerts == ["Invalid value for language", "Invalid value for title"]

    view_model.update_draft(language="ruby")
    snippet = await view_model.add()
    assert snippet.language == "ruby"


@pytest.mark.asyncio
async def test_local_add_appends_and_remote_add_prepends():
    local = _local_view_model()
    await local.start()
    await local.add(SnippetDraft(title="first", code="1"))
    await local.add(SnippetDraft(title="second", code="2"))
    assert [s.title for s in local.snippets] == ["first", "second"]

    remote = _remote_view_model()
    await remote.start()
    await remote.add(SnippetDraft(title="first", code="1"))
    await remote.add(SnippetDraft(title="second", code="2"))
    assert [s.title for s in remote.snippets] == ["second", "first"]
    assert all(s.user_id == "alice" for s in remote.snippets)


@pytest.mark.asyncio
async def test_remote_requires_sign_in():
    alerts = _Alerts()
    collection = _FakeCollection()
    view_model = _remote_view_model(collection, uid=None, notify=alerts)

    assert await view_model.start() == []
    with pytest.raises(NotSignedInError):
        await view_model.add(SORT_DRAFT)
    assert collection.documents == []
    assert alerts

    await view_model.sign_in(Identity(uid="alice"))
    await view_model.add(SORT_DRAFT)
    assert len(view_model.snippets) == 1

    view_model.sign_out()
    assert view_model.snippets == []

    await view_model.sign_in(Identity(uid="alice"))
    assert [s.title for s in view_model.snippets] == ["Sort"]


@pytest.mark.asyncio
async def test_delete_requires_confirmation():
    prompts = []

    def _confirm(prompt):
        prompts.append(prompt)
        return False

    view_model = _local_view_model(confirm=_confirm)
    await view_model.start()
    snippet = await view_model.add(SORT_DRAFT)

    assert await view_model.delete(snippet.id) is False
    assert prompts == [DELETE_PROMPT]
    assert len(view_model.snippets) == 1

    assert await view_model.delete(snippet.id, confirmed=True) is True
    assert view_model.snippets == []


@pytest.mark.asyncio
async def test_delete_unknown_id_is_a_no_op():
    local = _local_view_model(confirm=lambda _prompt: True)
    await local.start()
    await local.add(SORT_DRAFT)

    assert await local.delete("does-not-exist") is False
    assert len(local.snippets) == 1

    alerts = _Alerts()
    remote = _remote_view_model(notify=alerts, confirm=lambda _prompt: True)
    await remote.start()
    await remote.add(SORT_DRAFT)

    assert await remote.delete(str(ObjectId())) is False
    assert len(remote.snippets) == 1
    assert alerts == ["Snippet not found"]


@pytest.mark.asyncio
async def test_store_failures_leave_memory_unchanged():
    alerts = _Alerts()
    existing = Snippet(id="1", title="kept", code="x")
    view_model = SnippetViewModel(_BrokenStore([existing]), notify=alerts)
    await view_model.start()

    with pytest.raises(StoreError):
        await view_model.add(SORT_DRAFT)
    with pytest.raises(StoreError):
        await view_model.delete("1", confirmed=True)

    assert [s.id for s in view_model.snippets] == ["1"]
    assert len(alerts) == 2
    assert alerts[0].startswith("Failed to save snippet")


@pytest.mark.asyncio
async def test_export_then_import_reproduces_snippets():
    source = _local_view_model()
    await source.start()
    await source.add(SORT_DRAFT)
    await source.add(SnippetDraft(title="Hello", description="greeting", code="puts 'hi'", tags="ruby", language=Language.RUBY))

    payload = source.export()

    for target in (_local_view_model(), _remote_view_model()):
        await target.start()
        result = await target.import_snippets(payload)

        assert result.imported == 2
        assert result.skipped == 0
        expected = {(s.title, s.code, s.language, tuple(s.tags)) for s in source.snippets}
        actual = {(s.title, s.code, s.language, tuple(s.tags)) for s in target.snippets}
        assert actual == expected


@pytest.mark.asyncio
async def test_import_restamps_owner_and_always_inserts():
    view_model = _remote_view_model(uid="bob")
    await view_model.start()
    payload = json.dumps(
        [
            {"id": "abc", "userId": "alice", "title": "t", "code": "c"},
            {"id": "abc", "userId": "alice", "title": "t", "code": "c"},
        ]
    )

    result = await view_model.import_snippets(payload)

    assert result.imported == 2
    assert len(view_model.snippets) == 2
    assert all(s.user_id == "bob" and s.id != "abc" for s in view_model.snippets)


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", ['"a string"', '{"title": "t", "code": "c"}', "{broken"])
async def test_import_rejects_non_array_payload(payload):
    alerts = _Alerts()
    view_model = _local_view_model(notify=alerts)
    await view_model.start()
    await view_model.add(SORT_DRAFT)

    with pytest.raises(MalformedImportError):
        await view_model.import_snippets(payload)

    assert len(view_model.snippets) == 1
    assert len(alerts) == 1


@pytest.mark.asyncio
async def test_remote_import_keeps_entries_committed_before_failure():
    collection = _FakeCollection(fail_after=1)
    view_model = _remote_view_model(collection)
    await view_model.start()
    payload = json.dumps([{"title": str(i), "code": "x"} for i in range(3)])

    with pytest.raises(StoreError):
        await view_model.import_snippets(payload)

    assert len(collection.documents) == 1
    assert [s.title for s in view_model.snippets] == ["0"]


@pytest.mark.asyncio
async def test_export_empty_collection():
    alerts = _Alerts()
    remote = _remote_view_model(notify=alerts)
    await remote.start()

    assert remote.export() is None
    assert alerts == ["No snippets to export"]

    local = _local_view_model()
    await local.start()
    assert json.loads(local.export()) == []
