"""Schemas for document editing and export endpoints."""

from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field

from blockmail.document_models import Block, Snapshot
from blockmail.schemas.actions import ValidationResult


class BlockPayload(BaseModel):
    id: str = Field(..., description="Block identifier, unique within the document")
    type: str = Field(..., description="Block kind")
    content: Optional[str] = Field(default=None, description="Text value, if the block has one")
    settings: dict[str, Any] = Field(default_factory=dict, description="Kind-specific settings")

    @classmethod
    def from_block(cls, block: Block) -> "BlockPayload":
        return cls(id=block.id, type=block.type, content=block.content, settings=dict(block.settings))

    def to_block(self) -> Block:
        return Block(id=self.id, type=self.type, content=self.content, settings=dict(self.settings))


class CreateDocumentRequest(BaseModel):
    document_id: Optional[str] = Field(default=None, description="Explicit id; generated when omitted")
    blocks: Any = Field(
        default_factory=list,
        description="Persisted block list. Entries that do not look like blocks are dropped.",
    )


class AddBlockRequest(BaseModel):
    type: str = Field(..., description="Kind of the new block")
    id: Optional[str] = Field(default=None, description="Explicit id; generated when omitted")
    content: Optional[str] = None
    settings: dict[str, Any] = Field(default_factory=dict)
    position: Optional[int] = Field(default=None, description="Insert position; appended when omitted")


class ReplaceBlocksRequest(BaseModel):
    blocks: List[BlockPayload] = Field(default_factory=list, description="Full block sequence held by the client")
    from_history: bool = Field(
        default=False,
        description="The sequence came from the client's own undo or redo and must not be recorded again.",
    )


class UpdateBlockRequest(BaseModel):
    type: Optional[str] = None
    content: Optional[str] = None
    settings: Optional[dict[str, Any]] = None
    merge_settings: bool = Field(
        default=False,
        description="Merge settings into the existing ones instead of replacing them.",
    )


class ChangeTypeRequest(BaseModel):
    type: str = Field(..., description="New block kind; settings are reset")


class MoveBlockRequest(BaseModel):
    direction: Literal["up", "down"]


class ReorderRequest(BaseModel):
    block_ids: List[str] = Field(default_factory=list)


class DocumentResponse(BaseModel):
    document_id: str
    blocks: List[BlockPayload] = Field(default_factory=list)
    can_undo: bool = False
    can_redo: bool = False

    @classmethod
    def from_snapshot(cls, document_id: str, blocks: Snapshot, *, can_undo: bool, can_redo: bool) -> "DocumentResponse":
        return cls(
            document_id=document_id,
            blocks=[BlockPayload.from_block(block) for block in blocks],
            can_undo=can_undo,
            can_redo=can_redo,
        )


class BlockExportResponse(BaseModel):
    block_id: str
    block_type: str
    markup: List[dict[str, Any]] = Field(default_factory=list)
    validation: List[ValidationResult] = Field(default_factory=list)
    error: Optional[str] = Field(default=None, description="Why the block produced no markup")


class ExportBlocksRequest(BaseModel):
    blocks: Any = Field(default_factory=list, description="Block list to export without opening a session")
    include_invalid: bool = Field(default=True, description="Also compile blocks that fail validation")


class DocumentExportResponse(BaseModel):
    document_id: Optional[str] = None
    discarded_blocks: int = Field(default=0, description="Entries dropped for lacking an id or type")
    blocks: List[BlockExportResponse] = Field(default_factory=list)
    failed_block_ids: List[str] = Field(default_factory=list)
    invalid_block_ids: List[str] = Field(default_factory=list)
    json_ld: List[str] = Field(
        default_factory=list,
        description="Compact JSON-LD strings ready to embed in script tags.",
    )
