"""Common document model definitions used across the editor core."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Mapping

logger = logging.getLogger(__name__)

BlockType = Literal[
    "text",
    "heading",
    "image",
    "button",
    "divider",
    "spacer",
    "footer",
    "address",
    "social",
    "rating",
    "feedback",
    "subscribe",
    "qr",
    # Action blocks
    "action",
    "gmailActions",
    "goto",
    "confirm",
    "rsvp",
    "track",
    "update",
    "cancel",
    "download",
    "promocode",
    # Reservation blocks
    "flight",
    "hotel",
    "train",
    "bus",
    "rental",
    "restaurant",
    # Commerce blocks
    "order",
    "invoice",
]

CONTENT_BLOCK_TYPES = frozenset(
    {
        "text",
        "heading",
        "image",
        "button",
        "divider",
        "spacer",
        "footer",
        "address",
        "social",
        "rating",
        "feedback",
        "subscribe",
        "qr",
    }
)

ACTION_BLOCK_TYPES = frozenset(
    {
        "action",
        "gmailActions",
        "goto",
        "confirm",
        "rsvp",
        "track",
        "update",
        "cancel",
        "download",
        "promocode",
        "flight",
        "hotel",
        "train",
        "bus",
        "rental",
        "restaurant",
        "order",
        "invoice",
    }
)

BLOCK_TYPES = CONTENT_BLOCK_TYPES | ACTION_BLOCK_TYPES


@dataclass(frozen=True, slots=True)
class Block:
    """Normalized representation of one document block.

    Parameters
    ----------
    id:
        Identifier, unique within the owning document.
    type:
        The kind of block. Action kinds carry an action configuration in
        ``settings``.
    content:
        Optional text value. ``None`` means the block has no content key.
    settings:
        Open string-keyed map. It is replaced wholesale on update.
    """

    id: str
    type: str
    content: str | None = None
    settings: dict[str, Any] = field(default_factory=dict)

    @property
    def is_action(self) -> bool:
        return self.type in ACTION_BLOCK_TYPES


Snapshot = tuple[Block, ...]


def block_from_dict(data: Mapping[str, Any]) -> Block:
    """Build a :class:`Block` from its persisted JSON shape."""

    settings = data.get("settings")
    content = data.get("content")
    return Block(
        id=str(data["id"]),
        type=str(data["type"]),
        content=content if isinstance(content, str) else None,
        settings=dict(settings) if isinstance(settings, Mapping) else {},
    )


def block_to_dict(block: Block) -> dict[str, Any]:
    """Return the persisted JSON shape of ``block``; absent content is omitted."""

    data: dict[str, Any] = {"id": block.id, "type": block.type}
    if block.content is not None:
        data["content"] = block.content
    data["settings"] = dict(block.settings)
    return data


def _is_block_like(item: Any) -> bool:
    if not isinstance(item, Mapping):
        return False
    block_id = item.get("id")
    block_type = item.get("type")
    if not isinstance(block_id, (str, int)) or isinstance(block_id, bool) or block_id == "":
        return False
    if not isinstance(block_type, str) or not block_type:
        return False
    settings = item.get("settings")
    return settings is None or isinstance(settings, Mapping)


def load_blocks(raw: Any) -> Snapshot:
    """Convert an untrusted persisted body into a block snapshot.

    Entries that do not look like blocks are discarded rather than failing the
    whole load. A body that is not a list yields an empty document. Later
    duplicates of an already seen id are dropped to keep ids unique.
    """

    blocks, _ = parse_blocks(raw)
    return blocks


def parse_blocks(raw: Any) -> tuple[Snapshot, int]:
    """Like :func:`load_blocks`, also returning how many entries were discarded."""

    if not isinstance(raw, (list, tuple)):
        if raw is not None:
            logger.warning("Discarding document body of type %s", type(raw).__name__)
        return (), 0

    blocks: list[Block] = []
    seen: set[str] = set()
    discarded = 0
    for item in raw:
        if not _is_block_like(item):
            discarded += 1
            continue
        block = block_from_dict(item)
        if block.id in seen:
            discarded += 1
            continue
        seen.add(block.id)
        blocks.append(block)

    if discarded:
        logger.warning("Discarded %s malformed block(s) while loading document", discarded)
    return tuple(blocks), discarded


def dump_blocks(blocks: Iterable[Block]) -> list[dict[str, Any]]:
    return [block_to_dict(block) for block in blocks]


__all__ = [
    "ACTION_BLOCK_TYPES",
    "BLOCK_TYPES",
    "Block",
    "BlockType",
    "CONTENT_BLOCK_TYPES",
    "Snapshot",
    "block_from_dict",
    "block_to_dict",
    "dump_blocks",
    "load_blocks",
    "parse_blocks",
]
