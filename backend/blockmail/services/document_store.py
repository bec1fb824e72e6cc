"""Persistence boundary for editor documents."""

from __future__ import annotations

import copy
import logging
from typing import Any, Iterable, Protocol

from blockmail.document_models import Block, Snapshot, dump_blocks, load_blocks

logger = logging.getLogger(__name__)


class DocumentNotFoundError(KeyError):
    """Raised when a document id is not known to the store."""

    def __init__(self, document_id: str) -> None:
        super().__init__(document_id)
        self.document_id = document_id

    def __str__(self) -> str:
        return f"Document '{self.document_id}' not found"


class DocumentStore(Protocol):
    def load(self, document_id: str) -> Snapshot:
        ...

    def save(self, document_id: str, blocks: Iterable[Block]) -> None:
        ...

    def delete(self, document_id: str) -> None:
        ...


class InMemoryDocumentStore:
    """Keeps serialized documents in a dict.

    Bodies are stored in their persisted JSON shape and go through
    :func:`load_blocks` on the way out, so malformed bodies written with
    :meth:`put_raw` are sanitized the same way a real backend would be.
    """

    def __init__(self) -> None:
        self._documents: dict[str, Any] = {}

    def load(self, document_id: str) -> Snapshot:
        try:
            raw = self._documents[document_id]
        except KeyError as exc:
            raise DocumentNotFoundError(document_id) from exc
        return load_blocks(copy.deepcopy(raw))

    def save(self, document_id: str, blocks: Iterable[Block]) -> None:
        body = dump_blocks(blocks)
        self._documents[document_id] = body
        logger.info("Saved document '%s' with %s block(s)", document_id, len(body))

    def put_raw(self, document_id: str, body: Any) -> None:
        self._documents[document_id] = copy.deepcopy(body)

    def delete(self, document_id: str) -> None:
        if self._documents.pop(document_id, None) is None:
            raise DocumentNotFoundError(document_id)

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._documents


__all__ = ["DocumentNotFoundError", "DocumentStore", "InMemoryDocumentStore"]
