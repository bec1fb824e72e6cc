"""Editing sessions binding a block sequence to its undo history."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Iterable, Mapping

from blockmail import block_store, history
from blockmail.core.config import settings
from blockmail.document_models import Block, Snapshot
from blockmail.history import ChangeSource, HistoryState
from blockmail.services.autosave import AutosaveScheduler
from blockmail.services.document_store import DocumentNotFoundError, DocumentStore

logger = logging.getLogger(__name__)

ChangeListener = Callable[[str, Snapshot], None]


def new_block_id() -> str:
    return f"block-{uuid.uuid4().hex[:12]}"


class EditorSession:
    """Current blocks of one document plus the history behind them."""

    def __init__(
        self,
        document_id: str,
        blocks: Iterable[Block] = (),
        *,
        history_limit: int | None = None,
        id_factory: block_store.IdFactory = block_store.default_copy_id,
        on_change: ChangeListener | None = None,
    ) -> None:
        self.document_id = document_id
        self._limit = history_limit if history_limit is not None else settings.history_limit
        self._id_factory = id_factory
        self._on_change = on_change
        self._history = history.initial_history(blocks)

    @property
    def blocks(self) -> Snapshot:
        return self._history.present

    @property
    def history(self) -> HistoryState:
        return self._history

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    # ------------------------------------------------------------------
    # Structural edits
    # ------------------------------------------------------------------
    def add_block(self, block: Block, position: int | None = None) -> Snapshot:
        if block_store.find_block(self.blocks, block.id) is not None:
            raise ValueError(f"Block id '{block.id}' already exists")
        return self._commit(block_store.add_block(self.blocks, block, position))

    def remove_block(self, block_id: str) -> Snapshot:
        return self._commit(block_store.remove_block(self.blocks, block_id))

    def update_block(self, block_id: str, updates: Mapping[str, Any], *, merge_settings: bool = False) -> Snapshot:
        """Apply ``updates`` as one undoable step.

        With ``merge_settings`` a ``settings`` entry is merged into the
        existing settings instead of replacing them.
        """

        if merge_settings and updates.get("settings") is not None:
            block = self._require(block_id)
            updates = {**updates, "settings": {**block.settings, **updates["settings"]}}
        return self._commit(block_store.update_block(self.blocks, block_id, updates))

    def update_settings(self, block_id: str, updates: Mapping[str, Any]) -> Snapshot:
        return self.update_block(block_id, {"settings": updates}, merge_settings=True)

    def change_block_type(self, block_id: str, block_type: str) -> Snapshot:
        return self._commit(block_store.change_block_type(self.blocks, block_id, block_type))

    def move_block(self, block_id: str, direction: block_store.Direction) -> Snapshot:
        return self._commit(block_store.move_block(self.blocks, block_id, direction))

    def duplicate_block(self, block_id: str) -> Snapshot:
        return self._commit(block_store.duplicate_block(self.blocks, block_id, id_factory=self._id_factory))

    def reorder_blocks(self, block_ids: Iterable[str]) -> Snapshot:
        return self._commit(block_store.reorder_blocks(self.blocks, block_ids))

    def set_blocks(self, blocks: Iterable[Block], source: ChangeSource = ChangeSource.EXTERNAL) -> Snapshot:
        """Accept a whole sequence from the client.

        A sequence the client obtained from its own undo/redo is passed with
        ``ChangeSource.FROM_HISTORY`` and is not recorded again.
        """

        return self._commit(tuple(blocks), source)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def undo(self) -> Snapshot:
        return self._move_in_history(history.undo(self._history))

    def redo(self) -> Snapshot:
        return self._move_in_history(history.redo(self._history, limit=self._limit))

    def clear_history(self) -> None:
        self._history = history.clear_history(self._history)

    def load(self, blocks: Iterable[Block]) -> Snapshot:
        """Replace the document content; earlier history is discarded."""

        self._history = history.reset_history(blocks)
        logger.info("Loaded %s block(s) into session '%s'", len(self.blocks), self.document_id)
        return self.blocks

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _require(self, block_id: str) -> Block:
        block = block_store.find_block(self.blocks, block_id)
        if block is None:
            raise KeyError(block_id)
        return block

    def _commit(self, blocks: Snapshot, source: ChangeSource = ChangeSource.EXTERNAL) -> Snapshot:
        previous = self._history
        self._history = history.record_change(previous, blocks, source, limit=self._limit)
        if self._history is not previous:
            self._notify()
        return self.blocks

    def _move_in_history(self, state: HistoryState) -> Snapshot:
        if state is not self._history:
            self._history = state
            self._notify()
        return self.blocks

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.document_id, self.blocks)


class SessionRegistry:
    """Open editing sessions keyed by document id."""

    def __init__(self, store: DocumentStore, *, autosave: AutosaveScheduler | None = None) -> None:
        self._store = store
        self._autosave = autosave
        self._sessions: dict[str, EditorSession] = {}

    @property
    def store(self) -> DocumentStore:
        return self._store

    def create(self, blocks: Iterable[Block], document_id: str | None = None) -> EditorSession:
        document_id = document_id or uuid.uuid4().hex
        snapshot = tuple(blocks)
        self._store.save(document_id, snapshot)
        session = self._new_session(document_id, snapshot)
        logger.info("Created document '%s'", document_id)
        return session

    def get(self, document_id: str) -> EditorSession:
        session = self._sessions.get(document_id)
        if session is None:
            session = self._new_session(document_id, self._store.load(document_id))
        return session

    def close(self, document_id: str) -> None:
        if self._sessions.pop(document_id, None) is None:
            raise DocumentNotFoundError(document_id)
        if self._autosave is not None:
            self._autosave.cancel(document_id)

    def _new_session(self, document_id: str, blocks: Snapshot) -> EditorSession:
        on_change = self._autosave.schedule if self._autosave is not None else None
        session = EditorSession(document_id, blocks, on_change=on_change)
        self._sessions[document_id] = session
        return session


__all__ = ["ChangeListener", "EditorSession", "SessionRegistry", "new_block_id"]
