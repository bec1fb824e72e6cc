"""Structural operations over an ordered block sequence.

Every operation takes a snapshot and returns a new one. The input snapshot is
never modified, and operations on an unknown id return the input unchanged.
"""
from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Any, Callable, Iterable, Literal, Mapping

from .document_models import Block, Snapshot

Direction = Literal["up", "down"]
IdFactory = Callable[[Block], str]

_UPDATABLE_FIELDS = frozenset({"type", "content", "settings"})


def default_copy_id(block: Block) -> str:
    return f"{block.id}-copy-{uuid.uuid4().hex[:8]}"


def _index_of(blocks: Snapshot, block_id: str) -> int:
    for index, block in enumerate(blocks):
        if block.id == block_id:
            return index
    return -1


def add_block(blocks: Iterable[Block], block: Block, position: int | None = None) -> Snapshot:
    """Insert ``block`` at ``position`` (clamped to ``[0, len]``), or append it."""

    current = tuple(blocks)
    if position is None:
        return current + (block,)
    position = max(0, min(position, len(current)))
    return current[:position] + (block,) + current[position:]


def remove_block(blocks: Iterable[Block], block_id: str) -> Snapshot:
    current = tuple(blocks)
    index = _index_of(current, block_id)
    if index == -1:
        return current
    return current[:index] + current[index + 1 :]


def update_block(blocks: Iterable[Block], block_id: str, updates: Mapping[str, Any]) -> Snapshot:
    """Shallow-merge ``updates`` into the top-level fields of the matching block.

    ``settings`` is replaced wholesale; callers merge settings themselves.
    ``id`` is not updatable.
    """

    current = tuple(blocks)
    index = _index_of(current, block_id)
    if index == -1:
        return current

    unknown = set(updates) - _UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Unsupported block fields: {', '.join(sorted(unknown))}")

    changes = dict(updates)
    if "settings" in changes:
        changes["settings"] = dict(changes["settings"] or {})
    updated = replace(current[index], **changes)
    return current[:index] + (updated,) + current[index + 1 :]


def change_block_type(blocks: Iterable[Block], block_id: str, block_type: str) -> Snapshot:
    """Switch a block to another kind; its settings no longer apply and are reset."""

    return update_block(blocks, block_id, {"type": block_type, "settings": {}})


def move_block(blocks: Iterable[Block], block_id: str, direction: Direction) -> Snapshot:
    current = tuple(blocks)
    index = _index_of(current, block_id)
    if index == -1:
        return current

    if direction == "up":
        target = index - 1
    elif direction == "down":
        target = index + 1
    else:
        raise ValueError(f"Unknown direction: {direction!r}")
    if target < 0 or target >= len(current):
        return current

    reordered = list(current)
    reordered[index], reordered[target] = reordered[target], reordered[index]
    return tuple(reordered)


def duplicate_block(
    blocks: Iterable[Block],
    block_id: str,
    *,
    id_factory: IdFactory = default_copy_id,
) -> Snapshot:
    """Insert a copy of the matching block, under a fresh id, right after it."""

    current = tuple(blocks)
    index = _index_of(current, block_id)
    if index == -1:
        return current

    original = current[index]
    taken = {block.id for block in current}
    new_id = id_factory(original)
    while new_id in taken:
        new_id = default_copy_id(original)

    copy = replace(original, id=new_id, settings=dict(original.settings))
    return current[: index + 1] + (copy,) + current[index + 1 :]


def reorder_blocks(blocks: Iterable[Block], block_ids: Iterable[str]) -> Snapshot:
    """Return the blocks named by ``block_ids`` in that order.

    Ids missing from the current sequence are skipped. Blocks not named are
    dropped, and a repeated id yields its block only once.
    """

    by_id = {block.id: block for block in blocks}
    reordered: list[Block] = []
    emitted: set[str] = set()
    for block_id in block_ids:
        block = by_id.get(block_id)
        if block is None or block_id in emitted:
            continue
        emitted.add(block_id)
        reordered.append(block)
    return tuple(reordered)


def find_block(blocks: Iterable[Block], block_id: str) -> Block | None:
    for block in blocks:
        if block.id == block_id:
            return block
    return None


__all__ = [
    "Direction",
    "IdFactory",
    "add_block",
    "change_block_type",
    "default_copy_id",
    "duplicate_block",
    "find_block",
    "move_block",
    "remove_block",
    "reorder_blocks",
    "update_block",
]
