"""HTTP-level tests for the editor API."""

from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from blockmail.api.deps import get_autosave, get_document_store, get_session_registry
from blockmail.document_models import Block
from blockmail.main import app, lifespan
from blockmail.services.document_store import InMemoryDocumentStore
from blockmail.services.editor_session import SessionRegistry


@pytest.fixture
def client():
    registry = SessionRegistry(InMemoryDocumentStore())
    app.dependency_overrides[get_session_registry] = lambda: registry
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _create(client: TestClient, blocks: list) -> dict:
    response = client.post("/api/documents", json={"document_id": "doc-1", "blocks": blocks})
    assert response.status_code == 201
    return response.json()


def test_health(client: TestClient) -> None:
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_catalog_lists_every_action_type(client: TestClient) -> None:
    catalog = client.get("/api/actions/catalog").json()

    assert len(catalog) == 17
    assert {"type": "ViewAction", "label": "Go To Action"}.items() <= catalog[0].items()


def test_validate_endpoint(client: TestClient) -> None:
    response = client.post(
        "/api/actions/validate",
        json={"type": "ConfirmAction", "name": "Approve", "handler": {"url": "http://x.com"}},
    )

    body = response.json()
    assert response.status_code == 200
    assert body["valid"] is False
    assert "ConfirmAction handler URL must use HTTPS" in body["errors"]


def test_markup_endpoint(client: TestClient) -> None:
    response = client.post(
        "/api/actions/markup",
        json={"type": "ViewAction", "name": "Open", "target": "https://x.com"},
    )

    body = response.json()
    assert response.status_code == 200
    assert body["markup"]["@type"] == "EmailMessage"
    assert body["json_ld"].startswith('{"@context":"http://schema.org"')


def test_markup_endpoint_errors(client: TestClient) -> None:
    missing = client.post("/api/actions/markup", json={"type": "FlightReservation", "name": "Flight"})
    unknown = client.post("/api/actions/markup", json={"type": "DanceAction", "name": "Dance"})

    assert missing.status_code == 422
    assert "flight" in missing.json()["detail"]
    assert unknown.status_code == 400


def test_document_editing_flow(client: TestClient) -> None:
    created = _create(
        client,
        [
            {"id": "A", "type": "text", "content": "Hello", "settings": {}},
            {"type": "text"},
            {"id": "B", "type": "heading", "content": "Title", "settings": {}},
        ],
    )
    assert [block["id"] for block in created["blocks"]] == ["A", "B"]
    assert created["can_undo"] is False

    moved = client.post("/api/documents/doc-1/blocks/B/move", json={"direction": "up"}).json()
    assert [block["id"] for block in moved["blocks"]] == ["B", "A"]

    added = client.post("/api/documents/doc-1/blocks", json={"type": "goto", "id": "G", "position": 0})
    assert added.status_code == 201
    assert added.json()["blocks"][0]["id"] == "G"

    updated = client.patch(
        "/api/documents/doc-1/blocks/G",
        json={"settings": {"name": "Open"}, "merge_settings": True},
    ).json()
    assert updated["blocks"][0]["settings"] == {"name": "Open"}

    undone = client.post("/api/documents/doc-1/undo").json()
    assert undone["blocks"][0]["settings"] == {}
    assert undone["can_redo"] is True

    redone = client.post("/api/documents/doc-1/redo").json()
    assert redone["blocks"][0]["settings"] == {"name": "Open"}

    fetched = client.get("/api/documents/doc-1").json()
    assert [block["id"] for block in fetched["blocks"]] == ["G", "B", "A"]


def test_duplicate_block_id_conflicts(client: TestClient) -> None:
    _create(client, [{"id": "A", "type": "text"}])

    response = client.post("/api/documents/doc-1/blocks", json={"type": "text", "id": "A"})

    assert response.status_code == 409


def test_unknown_document_is_404(client: TestClient) -> None:
    assert client.get("/api/documents/missing").status_code == 404
    assert client.post("/api/documents/missing/undo").status_code == 404


def test_document_export(client: TestClient) -> None:
    _create(
        client,
        [
            {"id": "G", "type": "goto", "settings": {"name": "Open", "target": "https://x.com"}},
            {"id": "F", "type": "flight", "settings": {}},
        ],
    )

    body = client.get("/api/documents/doc-1/export").json()

    assert body["document_id"] == "doc-1"
    assert body["failed_block_ids"] == ["F"]
    assert len(body["json_ld"]) == 1


def test_export_refuses_empty_documents(client: TestClient) -> None:
    _create(client, [])

    assert client.get("/api/documents/doc-1/export").status_code == 400
    assert client.post("/api/documents/export", json={"blocks": []}).status_code == 400


def test_stateless_export_reports_discarded_blocks(client: TestClient) -> None:
    response = client.post(
        "/api/documents/export",
        json={
            "blocks": [
                {"content": "no id"},
                {"id": "C", "type": "confirm", "settings": {"name": "Approve", "handler": {"url": "https://x.com"}}},
            ]
        },
    )

    body = response.json()
    assert response.status_code == 200
    assert body["discarded_blocks"] == 1
    assert body["blocks"][0]["markup"][0]["potentialAction"]["@type"] == "ConfirmAction"


def test_validate_endpoint_reports_non_string_type(client: TestClient) -> None:
    response = client.post("/api/actions/validate", json={"type": ["ViewAction"], "name": "Go"})

    assert response.status_code == 200
    assert response.json()["errors"] == ["Action type must be a string"]


def test_stateless_export_isolates_malformed_blocks(client: TestClient) -> None:
    response = client.post(
        "/api/documents/export",
        json={
            "blocks": [
                {"id": "bad", "type": "gmailActions", "settings": {"actions": 5}},
                {"id": "G", "type": "goto", "settings": {"name": "Open", "target": "https://x.com"}},
            ]
        },
    )

    body = response.json()
    assert response.status_code == 200
    assert body["failed_block_ids"] == ["bad"]
    assert len(body["json_ld"]) == 1


def test_patch_is_a_single_undo_step(client: TestClient) -> None:
    _create(client, [{"id": "A", "type": "text", "content": "Hello", "settings": {"align": "left"}}])

    patched = client.patch(
        "/api/documents/doc-1/blocks/A",
        json={"content": "Hi", "settings": {"color": "red"}, "merge_settings": True},
    ).json()
    assert patched["blocks"][0]["content"] == "Hi"
    assert patched["blocks"][0]["settings"] == {"align": "left", "color": "red"}

    undone = client.post("/api/documents/doc-1/undo").json()
    assert undone["blocks"][0]["content"] == "Hello"
    assert undone["blocks"][0]["settings"] == {"align": "left"}
    assert undone["can_undo"] is False


def test_replace_blocks(client: TestClient) -> None:
    _create(client, [{"id": "A", "type": "text"}])

    replaced = client.put(
        "/api/documents/doc-1/blocks",
        json={"blocks": [{"id": "B", "type": "heading", "content": "Title"}]},
    ).json()
    assert [block["id"] for block in replaced["blocks"]] == ["B"]
    assert replaced["can_undo"] is True

    undone = client.post("/api/documents/doc-1/undo").json()
    echoed = client.put(
        "/api/documents/doc-1/blocks",
        json={"blocks": undone["blocks"], "from_history": True},
    ).json()
    assert echoed["can_redo"] is True

    duplicated = client.put(
        "/api/documents/doc-1/blocks",
        json={"blocks": [{"id": "A", "type": "text"}, {"id": "A", "type": "text"}]},
    )
    assert duplicated.status_code == 400


def test_shutdown_saves_pending_edits() -> None:
    store = get_document_store()
    autosave = get_autosave()

    async def scenario() -> None:
        async with lifespan(app):
            autosave.schedule("shutdown-doc", (Block(id="A", type="text"),))

    asyncio.run(scenario())

    assert [block.id for block in store.load("shutdown-doc")] == ["A"]
    store.delete("shutdown-doc")
