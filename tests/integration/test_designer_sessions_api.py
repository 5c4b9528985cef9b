"""Integration tests for the designer sessions API."""

import pytest
from httpx import ASGITransport, AsyncClient

from domain_designer.application.services import DesignerSessionRegistry, KeyFieldBinder
from domain_designer.infrastructure.dependencies import get_session_registry
from domain_designer.infrastructure.repositories import InMemoryDomainRepository
from domain_designer.main import app

BASE = "/api/v1/designer-sessions"


@pytest.fixture(autouse=True)
def registry():
    """Give every test its own repository and session registry."""
    repository = InMemoryDomainRepository()
    registry = DesignerSessionRegistry(loader=repository, saver=repository, binder=KeyFieldBinder("Key"))
    app.dependency_overrides[get_session_registry] = lambda: registry
    yield registry
    app.dependency_overrides.clear()


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


async def _open_list(client: AsyncClient, name: str = "Reagents") -> str:
    response = await client.post(BASE, json={"kind": "list", "name": name})
    assert response.status_code == 201
    session_id = response.json()["session_id"]
    await client.post(f"{BASE}/{session_id}/fields", json={"name": "Id", "data_type": "int"})
    await client.post(f"{BASE}/{session_id}/fields", json={"name": "Name"})
    return session_id


@pytest.mark.asyncio
async def test_new_session_starts_unsaved_with_no_status():
    async with _client() as client:
        response = await client.post(BASE, json={"kind": "list"})

    assert response.status_code == 201
    data = response.json()
    assert data["design"]["id"] is None
    assert [p["status"] for p in data["panels"]] == ["NONE", "NONE"]
    assert data["can_save"] is False
    assert data["bottom_error_message"] is None


@pytest.mark.asyncio
async def test_design_select_key_and_save():
    async with _client() as client:
        session_id = await _open_list(client)

        options = await client.get(f"{BASE}/{session_id}/key-options")
        assert [o["target"] for o in options.json()] == [0, 1, "auto-increment"]

        keyed = await client.post(f"{BASE}/{session_id}/key", json={"target": 0})
        assert keyed.status_code == 200
        design = keyed.json()["design"]
        assert design["key_selection"] == "field"
        assert design["key_field_index"] == 0
        assert design["fields"][0]["required"] is True
        assert keyed.json()["can_save"] is True

        toggled = await client.post(f"{BASE}/{session_id}/panels/0/toggle", json={"collapsed": False})
        assert toggled.json()["panels"][0]["status"] == "INPROGRESS"
        assert toggled.json()["current_panel_index"] == 0

        submitted = await client.post(f"{BASE}/{session_id}/submit")
        assert submitted.status_code == 200
        body = submitted.json()
        assert body["outcome"] == "saved"
        assert body["session"]["design"]["id"] is not None
        assert body["session"]["design"]["fields"][0]["lock_type"] == "PKLocked"

        moved = await client.post(f"{BASE}/{session_id}/key", json={"target": 1})
        assert moved.status_code == 409

        removed = await client.delete(f"{BASE}/{session_id}/fields/0")
        assert removed.status_code == 409


@pytest.mark.asyncio
async def test_auto_increment_key_round_trip():
    async with _client() as client:
        session_id = await _open_list(client)
        await client.post(f"{BASE}/{session_id}/key", json={"target": 0})

        auto = await client.post(f"{BASE}/{session_id}/key", json={"target": "auto-increment"})
        design = auto.json()["design"]
        assert design["key_selection"] == "auto-increment"
        assert design["fields"][-1]["name"] == "Key"
        assert design["fields"][-1]["is_auto_increment"] is True

        back = await client.post(f"{BASE}/{session_id}/key", json={"target": 0})
        design = back.json()["design"]
        assert [f["name"] for f in design["fields"]] == ["Id", "Name"]
        assert design["key_field_index"] == 0


@pytest.mark.asyncio
async def test_server_rejection_marks_panel_todo():
    async with _client() as client:
        first = await _open_list(client)
        await client.post(f"{BASE}/{first}/key", json={"target": 0})
        await client.post(f"{BASE}/{first}/submit")

        second = await _open_list(client, name="reagents")
        await client.post(f"{BASE}/{second}/key", json={"target": 0})
        await client.post(f"{BASE}/{second}/panels/1/toggle", json={"collapsed": False})
        response = await client.post(f"{BASE}/{second}/submit")

    body = response.json()
    assert body["outcome"] == "failed"
    assert body["errors"][0]["message"] == "A list with the name 'reagents' already exists."
    assert body["session"]["panels"][0]["status"] == "TODO"
    assert body["session"]["can_save"] is False
    assert body["session"]["bottom_error_message"] == "A list with the name 'reagents' already exists."


@pytest.mark.asyncio
async def test_invalid_submit_does_not_save():
    async with _client() as client:
        session_id = await _open_list(client)
        response = await client.post(f"{BASE}/{session_id}/submit")

    body = response.json()
    assert body["outcome"] == "invalid"
    assert body["session"]["design"]["id"] is None
    assert body["session"]["bottom_error_message"] == (
        "You must specify a key field for your list in the fields panel to continue."
    )


@pytest.mark.asyncio
async def test_reopen_saved_domain_locks_key():
    async with _client() as client:
        session_id = await _open_list(client)
        await client.post(f"{BASE}/{session_id}/key", json={"target": 0})
        saved = await client.post(f"{BASE}/{session_id}/submit")
        domain_id = saved.json()["session"]["design"]["id"]

        reopened = await client.post(BASE, json={"domain_id": domain_id})
        assert reopened.status_code == 201
        new_id = reopened.json()["session_id"]

        response = await client.post(f"{BASE}/{new_id}/key", json={"target": "no-selection"})

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_field_and_property_edits():
    async with _client() as client:
        session_id = await _open_list(client)

        props = await client.patch(
            f"{BASE}/{session_id}/properties",
            json={"description": "Lab reagents", "title_column": "Name"},
        )
        assert props.json()["design"]["title_column"] == "Name"

        renamed = await client.patch(f"{BASE}/{session_id}/fields/1", json={"name": "Label", "required": True})
        design = renamed.json()["design"]
        assert design["fields"][1]["name"] == "Label"
        assert design["fields"][1]["required"] is True
        assert design["title_column"] == "Label"

        cleared = await client.patch(f"{BASE}/{session_id}/properties", json={"title_column": None})
        assert cleared.json()["design"]["title_column"] is None
        assert cleared.json()["design"]["description"] == "Lab reagents"

        removed = await client.delete(f"{BASE}/{session_id}/fields/1")
        assert [f["name"] for f in removed.json()["design"]["fields"]] == ["Id"]


@pytest.mark.asyncio
async def test_navigation_endpoints():
    async with _client() as client:
        session_id = await _open_list(client)

        first = await client.post(f"{BASE}/{session_id}/panels/next")
        second = await client.post(f"{BASE}/{session_id}/panels/next")
        back = await client.post(f"{BASE}/{session_id}/panels/previous")

    assert first.json()["current_panel_index"] == 0
    assert second.json()["current_panel_index"] == 1
    assert second.json()["panels"][0]["validate_panel"] is True
    assert back.json()["current_panel_index"] == 0


@pytest.mark.asyncio
async def test_error_mapping():
    async with _client() as client:
        session_id = await _open_list(client)

        bad_panel = await client.post(f"{BASE}/{session_id}/panels/5/toggle", json={"collapsed": False})
        bad_key = await client.post(f"{BASE}/{session_id}/key", json={"target": 9})
        bad_field = await client.patch(f"{BASE}/{session_id}/fields/9", json={"name": "X"})
        unknown = await client.get(f"{BASE}/missing")
        no_kind = await client.post(BASE, json={})
        unknown_domain = await client.post(BASE, json={"domain_id": "missing"})

    assert bad_panel.status_code == 422
    assert bad_key.status_code == 422
    assert bad_field.status_code == 422
    assert unknown.status_code == 404
    assert no_kind.status_code == 422
    assert unknown_domain.status_code == 404


@pytest.mark.asyncio
async def test_close_session(registry):
    async with _client() as client:
        session_id = await _open_list(client)
        controller = registry.get(session_id)

        closed = await client.delete(f"{BASE}/{session_id}")
        after = await client.get(f"{BASE}/{session_id}")

    assert closed.status_code == 204
    assert after.status_code == 404
    assert controller.closed
