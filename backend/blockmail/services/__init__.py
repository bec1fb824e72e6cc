"""Service layer for the application."""

from blockmail.services.action_settings import ActionSettingsService, BlockExport, DocumentExport
from blockmail.services.autosave import AutosaveScheduler
from blockmail.services.document_store import DocumentNotFoundError, DocumentStore, InMemoryDocumentStore
from blockmail.services.editor_session import EditorSession, SessionRegistry

__all__ = [
    "ActionSettingsService",
    "AutosaveScheduler",
    "BlockExport",
    "DocumentExport",
    "DocumentNotFoundError",
    "DocumentStore",
    "EditorSession",
    "InMemoryDocumentStore",
    "SessionRegistry",
]
