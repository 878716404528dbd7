"""Tests for the tenant store."""

import pytest

from broker_agent.models import AgentPersona, AgentTone, Tenant, TenantStatus


@pytest.mark.asyncio
async def test_tenant_crud(store):
    """Test tenant CRUD operations."""
    # Create
    tenant = Tenant(
        id="test-1",
        name="Test Realty",
        status=TenantStatus.ACTIVE,
        agent=AgentPersona(name="Lucia", tone=AgentTone.PROFESSIONAL),
    )
    saved = await store.save_tenant(tenant)
    assert saved.id == "test-1"

    # Read
    retrieved = await store.get_tenant("test-1")
    assert retrieved is not None
    assert retrieved.name == "Test Realty"
    assert retrieved.agent.name == "Lucia"

    # List
    tenants = await store.list_tenants()
    assert len(tenants) >= 1

    # Delete
    deleted = await store.delete_tenant("test-1")
    assert deleted is True

    # Verify deleted
    retrieved = await store.get_tenant("test-1")
    assert retrieved is None


@pytest.mark.asyncio
async def test_delete_missing_tenant(store):
    """Deleting an unknown tenant reports False."""
    assert await store.delete_tenant("nope") is False


@pytest.mark.asyncio
async def test_list_tenants_by_status(store):
    """Status filter narrows the listing."""
    persona = AgentPersona(name="Ana")
    await store.save_tenant(Tenant(id="a", name="A", status=TenantStatus.ACTIVE, agent=persona))
    await store.save_tenant(Tenant(id="p", name="P", status=TenantStatus.PENDING, agent=persona))

    active = await store.list_tenants(status=TenantStatus.ACTIVE)
    assert [t.id for t in active] == ["a"]


@pytest.mark.asyncio
async def test_seed_demo_tenants(store):
    """Demo agencies are active with no integrations connected."""
    seeded = await store.seed_demo_tenants()
    assert {t.id for t in seeded} == {"t_01", "t_02"}

    sofia = await store.get_tenant("t_01")
    assert sofia.agent.name == "Sofia"
    assert sofia.agent.tone == AgentTone.LUXURIOUS
    assert sofia.agent.temperature == 0.4
    assert not sofia.listings_connected
    assert not sofia.crm_connected

    assert len(await store.list_tenants()) == 2


@pytest.mark.asyncio
async def test_store_health(store):
    """In-memory store is always healthy."""
    assert await store.health_check() is True
