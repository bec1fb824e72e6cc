"""Common dependency functions for API routes."""

from functools import lru_cache
from typing import Generator

from fastapi import Depends, HTTPException

from blockmail.core.config import get_settings, settings
from blockmail.services.action_settings import ActionSettingsService
from blockmail.services.autosave import AutosaveScheduler
from blockmail.services.document_store import DocumentNotFoundError, InMemoryDocumentStore
from blockmail.services.editor_session import EditorSession, SessionRegistry


@lru_cache
def get_document_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@lru_cache
def get_autosave() -> AutosaveScheduler:
    return AutosaveScheduler(get_document_store().save, delay=settings.autosave_delay_seconds)


@lru_cache
def get_session_registry() -> SessionRegistry:
    return SessionRegistry(get_document_store(), autosave=get_autosave())


@lru_cache
def get_action_settings_service() -> ActionSettingsService:
    return ActionSettingsService(context=settings.markup_context)


def get_editor_session(
    document_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> EditorSession:
    try:
        return registry.get(document_id)
    except DocumentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def get_app_settings() -> Generator:
    yield get_settings()
