"""Abstract tenant store.

Tenant persistence belongs to the surrounding admin layer; the agent core
only needs to load a tenant before a session starts.
"""

from abc import ABC, abstractmethod

from broker_agent.models import Tenant


class TenantStore(ABC):
    """Abstract tenant store interface."""

    @abstractmethod
    async def get_tenant(self, tenant_id: str) -> Tenant | None:
        """Get a tenant by ID."""
        ...

    @abstractmethod
    async def save_tenant(self, tenant: Tenant) -> Tenant:
        """Save or replace a tenant."""
        ...

    @abstractmethod
    async def list_tenants(self, status: str | None = None) -> list[Tenant]:
        """List all tenants, optionally filtered by status."""
        ...

    @abstractmethod
    async def delete_tenant(self, tenant_id: str) -> bool:
        """Delete a tenant."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is healthy."""
        ...
