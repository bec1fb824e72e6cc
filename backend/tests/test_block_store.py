"""Unit tests for structural block operations."""

from __future__ import annotations

import pytest

from blockmail.block_store import (
    add_block,
    change_block_type,
    duplicate_block,
    find_block,
    move_block,
    remove_block,
    reorder_blocks,
    update_block,
)
from blockmail.document_models import Block


@pytest.fixture
def blocks() -> tuple[Block, ...]:
    return (
        Block(id="A", type="text", content="Hello", settings={"align": "left"}),
        Block(id="B", type="heading", content="Title"),
        Block(id="C", type="divider"),
    )


def test_move_then_duplicate(blocks: tuple[Block, ...]) -> None:
    moved = move_block(blocks[:2], "B", "up")
    assert [block.id for block in moved] == ["B", "A"]

    duplicated = duplicate_block(moved, "A", id_factory=lambda block: f"{block.id}-copy")
    assert [block.id for block in duplicated] == ["B", "A", "A-copy"]

    original, copy = duplicated[1], duplicated[2]
    assert copy.type == original.type
    assert copy.content == original.content
    assert copy.settings == original.settings
    assert copy.settings is not original.settings


def test_duplicate_retries_until_id_is_unique(blocks: tuple[Block, ...]) -> None:
    duplicated = duplicate_block(blocks, "A", id_factory=lambda block: "B")

    ids = [block.id for block in duplicated]
    assert len(ids) == len(set(ids)) == 4
    assert ids[1].startswith("A-copy-")


def test_add_block_clamps_position(blocks: tuple[Block, ...]) -> None:
    new = Block(id="N", type="spacer")

    assert [b.id for b in add_block(blocks, new)] == ["A", "B", "C", "N"]
    assert [b.id for b in add_block(blocks, new, 1)] == ["A", "N", "B", "C"]
    assert [b.id for b in add_block(blocks, new, 99)] == ["A", "B", "C", "N"]
    assert [b.id for b in add_block(blocks, new, -3)] == ["N", "A", "B", "C"]


def test_unknown_ids_leave_sequence_unchanged(blocks: tuple[Block, ...]) -> None:
    assert remove_block(blocks, "missing") == blocks
    assert update_block(blocks, "missing", {"content": "x"}) == blocks
    assert move_block(blocks, "missing", "down") == blocks
    assert duplicate_block(blocks, "missing") == blocks


def test_move_at_edges_is_noop(blocks: tuple[Block, ...]) -> None:
    assert move_block(blocks, "A", "up") == blocks
    assert move_block(blocks, "C", "down") == blocks


def test_move_rejects_unknown_direction(blocks: tuple[Block, ...]) -> None:
    with pytest.raises(ValueError):
        move_block(blocks, "A", "left")


def test_update_replaces_settings_wholesale(blocks: tuple[Block, ...]) -> None:
    updated = update_block(blocks, "A", {"settings": {"color": "red"}, "content": "Bye"})

    block = find_block(updated, "A")
    assert block is not None
    assert block.settings == {"color": "red"}
    assert block.content == "Bye"
    assert blocks[0].settings == {"align": "left"}


def test_update_rejects_id_change(blocks: tuple[Block, ...]) -> None:
    with pytest.raises(ValueError):
        update_block(blocks, "A", {"id": "Z"})


def test_change_block_type_resets_settings(blocks: tuple[Block, ...]) -> None:
    changed = change_block_type(blocks, "A", "goto")

    block = find_block(changed, "A")
    assert block is not None
    assert block.type == "goto"
    assert block.settings == {}
    assert block.content == "Hello"


def test_reorder_skips_unknown_and_repeated_ids(blocks: tuple[Block, ...]) -> None:
    reordered = reorder_blocks(blocks, ["C", "ghost", "A", "C"])

    assert [block.id for block in reordered] == ["C", "A"]


def test_operations_do_not_mutate_input() -> None:
    source = [Block(id="A", type="text"), Block(id="B", type="text")]

    move_block(source, "A", "down")
    remove_block(source, "A")
    add_block(source, Block(id="C", type="text"), 0)

    assert [block.id for block in source] == ["A", "B"]


def test_heading_and_action_block_scenario() -> None:
    view = {"type": "ViewAction", "name": "Go", "target": "https://x.com"}
    blocks = (Block(id="1", type="heading", content="Hi"), Block(id="2", type="action", settings=view))

    moved = move_block(blocks, "2", "up")
    assert [block.id for block in moved] == ["2", "1"]

    duplicated = duplicate_block(moved, "1")
    assert len(duplicated) == 3
    assert duplicated[0].id == "2"
    assert duplicated[1].id == "1"
    assert duplicated[2].id != "1"
    assert duplicated[2].content == "Hi"
