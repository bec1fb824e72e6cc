"""Undo/redo history over block-sequence snapshots.

History is an immutable :class:`HistoryState` threaded through pure transition
functions. Whether an incoming value is a new user change or the echo of an
undo/redo is stated explicitly with :class:`ChangeSource`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .document_models import Block, Snapshot

logger = logging.getLogger(__name__)

MAX_HISTORY_LENGTH = 50


class ChangeSource(str, Enum):
    EXTERNAL = "external"
    FROM_HISTORY = "from_history"


@dataclass(frozen=True, slots=True)
class HistoryState:
    past: tuple[Snapshot, ...]
    present: Snapshot
    future: tuple[Snapshot, ...]

    @property
    def can_undo(self) -> bool:
        return bool(self.past)

    @property
    def can_redo(self) -> bool:
        return bool(self.future)


def initial_history(blocks: Iterable[Block] = ()) -> HistoryState:
    return HistoryState(past=(), present=tuple(blocks), future=())


def record_change(
    state: HistoryState,
    blocks: Iterable[Block],
    source: ChangeSource = ChangeSource.EXTERNAL,
    *,
    limit: int = MAX_HISTORY_LENGTH,
) -> HistoryState:
    """Observe a new block sequence.

    An external value that differs from ``present`` pushes ``present`` onto
    ``past`` (keeping the newest ``limit`` entries) and clears ``future``.
    Values echoed back from an undo/redo, and values equal to ``present``,
    leave history untouched.
    """

    incoming = tuple(blocks)
    if source is ChangeSource.FROM_HISTORY:
        return state
    if incoming == state.present:
        return state

    past = (state.past + (state.present,))[-limit:] if limit > 0 else ()
    logger.debug("Recorded change; past=%s, future cleared (%s)", len(past), len(state.future))
    return HistoryState(past=past, present=incoming, future=())


def undo(state: HistoryState) -> HistoryState:
    if not state.past:
        logger.debug("Nothing to undo")
        return state
    return HistoryState(
        past=state.past[:-1],
        present=state.past[-1],
        future=(state.present,) + state.future,
    )


def redo(state: HistoryState, *, limit: int = MAX_HISTORY_LENGTH) -> HistoryState:
    if not state.future:
        logger.debug("Nothing to redo")
        return state
    past = (state.past + (state.present,))[-limit:] if limit > 0 else ()
    return HistoryState(past=past, present=state.future[0], future=state.future[1:])


def can_undo(state: HistoryState) -> bool:
    return state.can_undo


def can_redo(state: HistoryState) -> bool:
    return state.can_redo


def clear_history(state: HistoryState) -> HistoryState:
    """Forget both stacks while keeping the current value."""

    return initial_history(state.present)


def reset_history(blocks: Iterable[Block]) -> HistoryState:
    """Start over from ``blocks``; a document load is not itself undoable."""

    return initial_history(blocks)


__all__ = [
    "ChangeSource",
    "HistoryState",
    "MAX_HISTORY_LENGTH",
    "can_redo",
    "can_undo",
    "clear_history",
    "initial_history",
    "record_change",
    "redo",
    "reset_history",
    "undo",
]
