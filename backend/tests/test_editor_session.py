"""Tests for editing sessions and the session registry."""

from __future__ import annotations

import pytest

from blockmail.document_models import Block
from blockmail.history import ChangeSource
from blockmail.services.document_store import DocumentNotFoundError, InMemoryDocumentStore
from blockmail.services.editor_session import EditorSession, SessionRegistry


class RecordingListener:
    """Collects change notifications."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Block, ...]]] = []

    def __call__(self, document_id: str, blocks: tuple[Block, ...]) -> None:
        self.calls.append((document_id, blocks))


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def session(listener: RecordingListener) -> EditorSession:
    return EditorSession(
        "doc-1",
        [Block(id="A", type="text", content="Hello"), Block(id="B", type="heading", content="Title")],
        id_factory=lambda block: f"{block.id}-copy",
        on_change=listener,
    )


def test_edits_are_undoable(session: EditorSession) -> None:
    session.move_block("B", "up")
    session.duplicate_block("A")
    assert [block.id for block in session.blocks] == ["B", "A", "A-copy"]

    session.undo()
    assert [block.id for block in session.blocks] == ["B", "A"]
    session.undo()
    assert [block.id for block in session.blocks] == ["A", "B"]
    assert not session.can_undo

    session.redo()
    assert [block.id for block in session.blocks] == ["B", "A"]
    assert session.can_redo


def test_noop_edit_is_not_recorded(session: EditorSession, listener: RecordingListener) -> None:
    session.remove_block("missing")
    session.move_block("A", "up")

    assert not session.can_undo
    assert listener.calls == []


def test_changes_notify_listener(session: EditorSession, listener: RecordingListener) -> None:
    session.remove_block("A")
    session.undo()

    assert [len(blocks) for _, blocks in listener.calls] == [1, 2]
    assert {document_id for document_id, _ in listener.calls} == {"doc-1"}


def test_add_block_rejects_duplicate_id(session: EditorSession) -> None:
    with pytest.raises(ValueError):
        session.add_block(Block(id="A", type="divider"))


def test_update_settings_merges(session: EditorSession) -> None:
    session.update_block("A", {"settings": {"align": "left"}})
    session.update_settings("A", {"color": "red"})

    assert session.blocks[0].settings == {"align": "left", "color": "red"}
    with pytest.raises(KeyError):
        session.update_settings("missing", {})


def test_merged_update_is_one_undo_step(session: EditorSession) -> None:
    session.update_block("A", {"content": "Hi", "settings": {"align": "left"}}, merge_settings=True)

    assert session.blocks[0].content == "Hi"
    assert session.blocks[0].settings == {"align": "left"}
    session.undo()
    assert session.blocks[0].content == "Hello"
    assert session.blocks[0].settings == {}
    assert not session.can_undo


def test_set_blocks_echoed_from_history_is_not_recorded(
    session: EditorSession, listener: RecordingListener
) -> None:
    session.remove_block("A")
    session.undo()

    session.set_blocks(session.blocks, ChangeSource.FROM_HISTORY)

    assert session.can_redo
    assert len(listener.calls) == 2

    session.set_blocks([Block(id="Z", type="footer")])

    assert [block.id for block in session.blocks] == ["Z"]
    assert session.can_undo
    assert not session.can_redo


def test_change_block_type_resets_settings(session: EditorSession) -> None:
    session.update_block("A", {"settings": {"align": "left"}})
    session.change_block_type("A", "goto")

    assert session.blocks[0].type == "goto"
    assert session.blocks[0].settings == {}


def test_load_is_not_undoable(session: EditorSession) -> None:
    session.remove_block("A")
    session.load([Block(id="Z", type="footer")])

    assert [block.id for block in session.blocks] == ["Z"]
    assert not session.can_undo
    assert not session.can_redo


def test_history_limit_is_applied() -> None:
    session = EditorSession("doc", [], history_limit=2)
    for index in range(5):
        session.add_block(Block(id=str(index), type="text"))

    session.undo()
    session.undo()

    assert not session.can_undo
    assert [block.id for block in session.blocks] == ["0", "1", "2"]


def test_registry_creates_and_reopens_documents() -> None:
    store = InMemoryDocumentStore()
    registry = SessionRegistry(store)

    created = registry.create([Block(id="A", type="text")], "doc-1")

    assert "doc-1" in store
    assert registry.get("doc-1") is created
    registry.close("doc-1")
    reopened = registry.get("doc-1")
    assert reopened is not created
    assert [block.id for block in reopened.blocks] == ["A"]


def test_registry_sanitizes_stored_documents() -> None:
    store = InMemoryDocumentStore()
    store.put_raw("legacy", [{"id": "A", "type": "text"}, {"content": "orphan"}])
    registry = SessionRegistry(store)

    assert [block.id for block in registry.get("legacy").blocks] == ["A"]


def test_registry_unknown_document() -> None:
    registry = SessionRegistry(InMemoryDocumentStore())

    with pytest.raises(DocumentNotFoundError):
        registry.get("nope")
    with pytest.raises(DocumentNotFoundError):
        registry.close("nope")


def test_clear_history_keeps_blocks(session: EditorSession) -> None:
    session.remove_block("B")
    session.clear_history()

    assert [block.id for block in session.blocks] == ["A"]
    assert not session.can_undo


def test_store_delete() -> None:
    store = InMemoryDocumentStore()
    store.save("doc", [Block(id="A", type="text")])

    store.delete("doc")

    assert "doc" not in store
    with pytest.raises(DocumentNotFoundError):
        store.load("doc")
    with pytest.raises(DocumentNotFoundError):
        store.delete("doc")
