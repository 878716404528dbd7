"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends

from broker_agent.core.config import Settings, settings
from broker_agent.core.exceptions import TenantNotFound
from broker_agent.models import Tenant
from broker_agent.services.agent.registry import SessionRegistry
from broker_agent.storage.base import TenantStore
from broker_agent.storage.memory import InMemoryTenantStore

# Store singleton
_store: TenantStore | None = None

# Session registry singleton
_registry: SessionRegistry | None = None


def get_store() -> TenantStore:
    """Get the tenant store singleton.

    Tenant persistence is provided by the admin layer; the service runs on
    the in-memory store seeded with demo tenants.
    """
    global _store
    if _store is None:
        _store = InMemoryTenantStore()
    return _store


def get_session_registry() -> SessionRegistry:
    """Get the live session registry singleton."""
    global _registry
    if _registry is None:
        _registry = SessionRegistry(config=settings)
    return _registry


def get_app_settings() -> Settings:
    """Settings for request handlers."""
    return settings


# Type aliases for cleaner dependency injection
StoreDep = Annotated[TenantStore, Depends(get_store)]
RegistryDep = Annotated[SessionRegistry, Depends(get_session_registry)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]


async def load_tenant(tenant_id: str, store: TenantStore) -> Tenant:
    """Load a tenant or raise TenantNotFound."""
    tenant = await store.get_tenant(tenant_id)
    if not tenant:
        raise TenantNotFound(tenant_id)
    return tenant
