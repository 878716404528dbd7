"""Tests for the session endpoints."""

import pytest

from broker_agent.core.exceptions import AgentError, ModelUnavailableError
from broker_agent.models import AgentPersona, Tenant, TenantStatus
from broker_agent.services.agent.tools import SEARCH_PROPERTIES
from fakes import text_reply, tool_reply


async def _create_session(client, tenant_id="test-tenant") -> str:
    response = await client.post("/sessions", json={"tenant_id": tenant_id})
    assert response.status_code == 201
    return response.json()["session_id"]


@pytest.mark.asyncio
async def test_create_session(client, demo_tenant, registry):
    """Creating a session makes no model call."""
    response = await client.post("/sessions", json={"tenant_id": demo_tenant.id})
    assert response.status_code == 201

    data = response.json()
    assert data["tenant_id"] == demo_tenant.id
    assert data["agent_name"] == "Sofia"
    assert data["started"] is False
    assert len(registry) == 1


@pytest.mark.asyncio
async def test_create_session_unknown_tenant(client):
    response = await client.post("/sessions", json={"tenant_id": "ghost"})
    assert response.status_code == 404
    assert response.json()["error"] == "TENANT_NOT_FOUND"


@pytest.mark.asyncio
async def test_create_session_inactive_tenant(client, store):
    await store.save_tenant(
        Tenant(id="paused", name="Paused Realty", status=TenantStatus.INACTIVE, agent=AgentPersona(name="Ana"))
    )

    response = await client.post("/sessions", json={"tenant_id": "paused"})
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_start_session_imports_crm_history(client, demo_tenant, chat_model):
    """Without a body the history comes from the CRM; blank credentials mean mock."""
    session_id = await _create_session(client)

    response = await client.post(f"/sessions/{session_id}/start")
    assert response.status_code == 200

    data = response.json()
    assert [m["id"] for m in data["display"]] == ["mock_1"]
    assert data["transcript"] == []
    assert len(chat_model.starts) == 1


@pytest.mark.asyncio
async def test_start_session_with_history(client, demo_tenant, chat_model):
    session_id = await _create_session(client)

    response = await client.post(
        f"/sessions/{session_id}/start",
        json={"history": [{"role": "user", "text": "Hola"}, {"role": "model", "text": "¡Hola!"}]},
    )
    assert response.status_code == 200

    data = response.json()
    assert data["display"] == []
    assert [e["role"] for e in data["transcript"]] == ["user", "model"]
    assert len(chat_model.starts[0]["history"]) == 2


@pytest.mark.asyncio
async def test_send_message(client, demo_tenant, chat_model):
    chat_model.replies.extend(
        [
            tool_reply((SEARCH_PROPERTIES, {"location": "Palermo", "maxPrice": 1500, "operationType": "rent"})),
            text_reply("Tengo un loft en Palermo Soho."),
        ]
    )
    session_id = await _create_session(client)

    response = await client.post(f"/sessions/{session_id}/messages", json={"text": "Alquiler en Palermo"})
    assert response.status_code == 200

    data = response.json()
    assert data["text"] == "Tengo un loft en Palermo Soho."
    assert [p["id"] for p in data["properties"]] == [101]
    assert data["properties"][0]["operation"] == "rent"
    assert data["scheduling_link"] is None
    assert {entry["kind"] for entry in data["log"]} >= {"tool_call", "api_request"}


@pytest.mark.asyncio
async def test_send_message_model_failure(client, demo_tenant, chat_model):
    """Model failure is a 503 with a generic message."""
    chat_model.replies.append(ModelUnavailableError("quota exceeded", model="gemini/x"))
    session_id = await _create_session(client)

    response = await client.post(f"/sessions/{session_id}/messages", json={"text": "Hola"})
    assert response.status_code == 503

    data = response.json()
    assert data["error"] == "AGENT_UNAVAILABLE"
    assert data["message"] == AgentError.USER_MESSAGE
    assert "quota" not in response.text


@pytest.mark.asyncio
async def test_send_message_validation(client, demo_tenant):
    session_id = await _create_session(client)

    response = await client.post(f"/sessions/{session_id}/messages", json={"text": ""})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_send_message_unknown_session(client):
    response = await client.post("/sessions/nope/messages", json={"text": "Hola"})
    assert response.status_code == 404
    assert response.json()["error"] == "SESSION_NOT_FOUND"


@pytest.mark.asyncio
async def test_discard_session(client, demo_tenant, registry):
    session_id = await _create_session(client)

    response = await client.delete(f"/sessions/{session_id}")
    assert response.status_code == 204
    assert len(registry) == 0

    response = await client.delete(f"/sessions/{session_id}")
    assert response.status_code == 404
