"""Debounced persistence of editor documents."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Iterable

from blockmail.document_models import Block

logger = logging.getLogger(__name__)

SaveCallback = Callable[[str, tuple[Block, ...]], None]


class AutosaveScheduler:
    """Persist a document once edits have been quiet for ``delay`` seconds.

    Scheduling again for the same document replaces the pending save, so only
    the latest snapshot is written. Saves run on the running event loop.
    """

    def __init__(self, save: SaveCallback, *, delay: float = 1.0) -> None:
        self._save = save
        self._delay = delay
        self._pending: dict[str, asyncio.Task[None]] = {}
        self._snapshots: dict[str, tuple[Block, ...]] = {}

    @property
    def delay(self) -> float:
        return self._delay

    def schedule(self, document_id: str, blocks: Iterable[Block]) -> asyncio.Task[None]:
        snapshot = tuple(blocks)
        self.cancel(document_id)
        task = asyncio.get_running_loop().create_task(self._run(document_id, snapshot))
        self._pending[document_id] = task
        self._snapshots[document_id] = snapshot
        logger.debug("Autosave scheduled for '%s' in %ss", document_id, self._delay)
        return task

    def cancel(self, document_id: str) -> bool:
        task = self._pending.pop(document_id, None)
        self._snapshots.pop(document_id, None)
        if task is None or task.done():
            return False
        task.cancel()
        logger.debug("Autosave for '%s' superseded", document_id)
        return True

    def save_pending(self) -> int:
        """Write every pending snapshot now instead of waiting out the delay."""

        saved = 0
        for document_id in list(self._pending):
            blocks = self._snapshots.get(document_id)
            if not self.cancel(document_id) or blocks is None:
                continue
            self._write(document_id, blocks)
            saved += 1
        return saved

    def pending(self, document_id: str) -> bool:
        task = self._pending.get(document_id)
        return task is not None and not task.done()

    async def flush(self, document_id: str) -> None:
        """Wait for the pending save of ``document_id``, if any."""

        task = self._pending.get(document_id)
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def _run(self, document_id: str, blocks: tuple[Block, ...]) -> None:
        await asyncio.sleep(self._delay)
        try:
            self._write(document_id, blocks)
        finally:
            if self._pending.get(document_id) is asyncio.current_task():
                del self._pending[document_id]
                self._snapshots.pop(document_id, None)

    def _write(self, document_id: str, blocks: tuple[Block, ...]) -> None:
        try:
            self._save(document_id, blocks)
        except Exception:
            logger.exception("Autosave failed for document '%s'", document_id)
        else:
            logger.info("Autosaved document '%s'", document_id)


__all__ = ["AutosaveScheduler", "SaveCallback"]
