"""Tests for health check endpoints."""

import pytest

from broker_agent.api.dependencies import get_app_settings
from broker_agent.api.main import create_app


@pytest.mark.asyncio
async def test_health_check(client):
    """Test basic health check."""
    response = await client.get("/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_liveness_check(client):
    """Test liveness probe."""
    response = await client.get("/health/live")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "alive"


@pytest.mark.asyncio
async def test_readiness_reports_checks(client, registry, demo_tenant):
    """Readiness lists each check and the live session count."""
    registry.create(demo_tenant)

    response = await client.get("/health/ready")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["tenant_store"] is True
    assert "llm_api_key" in data["checks"]
    assert data["live_sessions"] == 1


@pytest.mark.asyncio
async def test_root_endpoint(client):
    """Test root endpoint."""
    response = await client.get("/")
    assert response.status_code == 200

    data = response.json()
    assert data["service"] == "Broker Agent API"
    assert data["status"] == "running"


@pytest.mark.asyncio
async def test_readiness_degraded_without_llm_key(app, client, test_settings):
    """A missing model key is reported, not fatal."""
    keyless = test_settings.model_copy(update={"llm": test_settings.llm.model_copy(update={"api_key": ""})})
    app.dependency_overrides[get_app_settings] = lambda: keyless

    response = await client.get("/health/ready")
    data = response.json()
    assert data["status"] == "degraded"
    assert data["checks"]["llm_api_key"] is False


def test_production_app_hides_docs(test_settings):
    """Interactive docs are development-only."""
    production = test_settings.model_copy(update={"app_env": "production"})
    application = create_app(production)
    assert application.docs_url is None
    assert application.redoc_url is None
