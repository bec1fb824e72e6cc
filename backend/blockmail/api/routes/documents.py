"""Endpoints for editing documents, undo/redo and markup export."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from blockmail.api.deps import get_action_settings_service, get_editor_session, get_session_registry
from blockmail.document_models import Block, Snapshot, parse_blocks
from blockmail.history import ChangeSource
from blockmail.markup_generator import to_json_ld
from blockmail.schemas.documents import (
    AddBlockRequest,
    BlockExportResponse,
    ChangeTypeRequest,
    CreateDocumentRequest,
    DocumentExportResponse,
    DocumentResponse,
    ExportBlocksRequest,
    MoveBlockRequest,
    ReorderRequest,
    ReplaceBlocksRequest,
    UpdateBlockRequest,
)
from blockmail.services.action_settings import ActionSettingsService, DocumentExport
from blockmail.services.editor_session import EditorSession, SessionRegistry, new_block_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


def _document_response(session: EditorSession) -> DocumentResponse:
    return DocumentResponse.from_snapshot(
        session.document_id,
        session.blocks,
        can_undo=session.can_undo,
        can_redo=session.can_redo,
    )


def _export_response(export: DocumentExport, **extra) -> DocumentExportResponse:
    return DocumentExportResponse(
        blocks=[
            BlockExportResponse(
                block_id=item.block_id,
                block_type=item.block_type,
                markup=item.markup,
                validation=item.validation,
                error=item.error,
            )
            for item in export.blocks
        ],
        failed_block_ids=export.failed_block_ids,
        invalid_block_ids=export.invalid_block_ids,
        json_ld=[to_json_ld(markup) for markups in export.markup_by_block().values() for markup in markups],
        **extra,
    )


def _require_blocks(blocks: Snapshot) -> None:
    if not blocks:
        raise HTTPException(status_code=400, detail="Email blocks are required")


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    payload: CreateDocumentRequest,
    registry: SessionRegistry = Depends(get_session_registry),
) -> DocumentResponse:
    blocks, _ = parse_blocks(payload.blocks)
    session = registry.create(blocks, payload.document_id)
    return _document_response(session)


@router.post("/export", response_model=DocumentExportResponse)
async def export_blocks(
    payload: ExportBlocksRequest,
    service: ActionSettingsService = Depends(get_action_settings_service),
) -> DocumentExportResponse:
    if not isinstance(payload.blocks, list) or not payload.blocks:
        raise HTTPException(status_code=400, detail="Email blocks are required")
    blocks, discarded = parse_blocks(payload.blocks)
    _require_blocks(blocks)
    export = service.export_document(blocks, include_invalid=payload.include_invalid)
    return _export_response(export, discarded_blocks=discarded)


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(session: EditorSession = Depends(get_editor_session)) -> DocumentResponse:
    return _document_response(session)


@router.post("/{document_id}/blocks", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def add_block(
    payload: AddBlockRequest,
    session: EditorSession = Depends(get_editor_session),
) -> DocumentResponse:
    block = Block(
        id=payload.id or new_block_id(),
        type=payload.type,
        content=payload.content,
        settings=dict(payload.settings),
    )
    try:
        session.add_block(block, payload.position)
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _document_response(session)


@router.put("/{document_id}/blocks", response_model=DocumentResponse)
async def replace_blocks(
    payload: ReplaceBlocksRequest,
    session: EditorSession = Depends(get_editor_session),
) -> DocumentResponse:
    blocks = [item.to_block() for item in payload.blocks]
    if len({block.id for block in blocks}) != len(blocks):
        raise HTTPException(status_code=400, detail="Block ids must be unique")
    source = ChangeSource.FROM_HISTORY if payload.from_history else ChangeSource.EXTERNAL
    session.set_blocks(blocks, source)
    return _document_response(session)


@router.patch("/{document_id}/blocks/{block_id}", response_model=DocumentResponse)
async def update_block(
    block_id: str,
    payload: UpdateBlockRequest,
    session: EditorSession = Depends(get_editor_session),
) -> DocumentResponse:
    updates = payload.model_dump(exclude_unset=True, exclude={"merge_settings"})
    try:
        if updates:
            session.update_block(block_id, updates, merge_settings=payload.merge_settings)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"Block '{block_id}' not found") from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _document_response(session)


@router.delete("/{document_id}/blocks/{block_id}", response_model=DocumentResponse)
async def remove_block(block_id: str, session: EditorSession = Depends(get_editor_session)) -> DocumentResponse:
    session.remove_block(block_id)
    return _document_response(session)


@router.put("/{document_id}/blocks/{block_id}/type", response_model=DocumentResponse)
async def change_block_type(
    block_id: str,
    payload: ChangeTypeRequest,
    session: EditorSession = Depends(get_editor_session),
) -> DocumentResponse:
    session.change_block_type(block_id, payload.type)
    return _document_response(session)


@router.post("/{document_id}/blocks/{block_id}/move", response_model=DocumentResponse)
async def move_block(
    block_id: str,
    payload: MoveBlockRequest,
    session: EditorSession = Depends(get_editor_session),
) -> DocumentResponse:
    session.move_block(block_id, payload.direction)
    return _document_response(session)


@router.post("/{document_id}/blocks/{block_id}/duplicate", response_model=DocumentResponse)
async def duplicate_block(block_id: str, session: EditorSession = Depends(get_editor_session)) -> DocumentResponse:
    session.duplicate_block(block_id)
    return _document_response(session)


@router.put("/{document_id}/order", response_model=DocumentResponse)
async def reorder_blocks(
    payload: ReorderRequest,
    session: EditorSession = Depends(get_editor_session),
) -> DocumentResponse:
    session.reorder_blocks(payload.block_ids)
    return _document_response(session)


@router.post("/{document_id}/undo", response_model=DocumentResponse)
async def undo(session: EditorSession = Depends(get_editor_session)) -> DocumentResponse:
    session.undo()
    return _document_response(session)


@router.post("/{document_id}/redo", response_model=DocumentResponse)
async def redo(session: EditorSession = Depends(get_editor_session)) -> DocumentResponse:
    session.redo()
    return _document_response(session)


@router.get("/{document_id}/export", response_model=DocumentExportResponse)
async def export_document(
    include_invalid: bool = True,
    session: EditorSession = Depends(get_editor_session),
    service: ActionSettingsService = Depends(get_action_settings_service),
) -> DocumentExportResponse:
    _require_blocks(session.blocks)
    export = service.export_document(session.blocks, include_invalid=include_invalid)
    logger.info("Exported document '%s': %s action block(s)", session.document_id, len(export.blocks))
    return _export_response(export, document_id=session.document_id)
