"""In-memory tenant store for development and testing."""

from broker_agent.models import (
    AgentPersona,
    AgentTone,
    IntegrationCredentials,
    Tenant,
    TenantStatus,
)
from broker_agent.storage.base import TenantStore


class InMemoryTenantStore(TenantStore):
    """In-memory tenant store implementation for development."""

    def __init__(self) -> None:
        self._tenants: dict[str, Tenant] = {}

    async def get_tenant(self, tenant_id: str) -> Tenant | None:
        return self._tenants.get(tenant_id)

    async def save_tenant(self, tenant: Tenant) -> Tenant:
        self._tenants[tenant.id] = tenant
        return tenant

    async def list_tenants(self, status: str | None = None) -> list[Tenant]:
        tenants = list(self._tenants.values())
        if status:
            tenants = [t for t in tenants if t.status == status]
        return tenants

    async def delete_tenant(self, tenant_id: str) -> bool:
        if tenant_id in self._tenants:
            del self._tenants[tenant_id]
            return True
        return False

    async def health_check(self) -> bool:
        return True

    # ==================== Development Helpers ====================

    async def seed_demo_tenants(self) -> list[Tenant]:
        """Create the demo agencies.

        Their integrations are left blank so the agent runs on the fallback
        listings dataset and mock CRM history.
        """
        demo_tenants = [
            Tenant(
                id="t_01",
                name="Elite Properties Buenos Aires",
                status=TenantStatus.ACTIVE,
                integrations=IntegrationCredentials(),
                agent=AgentPersona(
                    name="Sofia",
                    tone=AgentTone.LUXURIOUS,
                    model="gemini-2.5-flash",
                    temperature=0.4,
                    custom_instructions=(
                        "Focus on high-net-worth individuals. "
                        "Always mention 'exclusive amenities' and 'privacy'."
                    ),
                ),
            ),
            Tenant(
                id="t_02",
                name="Urban Living Realty",
                status=TenantStatus.ACTIVE,
                integrations=IntegrationCredentials(),
                agent=AgentPersona(
                    name="Mateo",
                    tone=AgentTone.FRIENDLY,
                    model="gemini-2.5-flash",
                    temperature=0.8,
                    custom_instructions=(
                        "You are helpful and quick. "
                        "Focus on rentals for students and young professionals."
                    ),
                ),
            ),
        ]
        return [await self.save_tenant(tenant) for tenant in demo_tenants]
