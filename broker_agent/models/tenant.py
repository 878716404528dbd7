"""Tenant models for multi-tenancy support."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TenantStatus(str, Enum):
    """Tenant account status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class AgentTone(str, Enum):
    """Conversational tone of the agent persona."""

    PROFESSIONAL = "Professional"
    FRIENDLY = "Friendly"
    ENERGETIC = "Energetic"
    LUXURIOUS = "Luxurious"


class IntegrationCredentials(BaseModel):
    """External integrations. An empty value means "not connected"."""

    model_config = ConfigDict(frozen=True)

    # Tokko Broker
    listings_api_key: str = ""

    # GoHighLevel / LeadConnector
    crm_location_id: str = ""
    crm_access_token: str = ""


class AgentPersona(BaseModel):
    """How the agent presents itself and which model backs it."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    name: str
    tone: AgentTone = AgentTone.PROFESSIONAL
    model: str = "gemini-2.5-flash"
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    custom_instructions: str = ""


class Tenant(BaseModel):
    """Tenant (real estate agency) configuration.

    Frozen: a persona or credential change requires a new session.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique tenant identifier")
    name: str = Field(..., description="Agency display name")
    status: TenantStatus = TenantStatus.PENDING
    integrations: IntegrationCredentials = Field(default_factory=IntegrationCredentials)
    agent: AgentPersona

    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def listings_connected(self) -> bool:
        return bool(self.integrations.listings_api_key.strip())

    @property
    def crm_connected(self) -> bool:
        return bool(
            self.integrations.crm_location_id.strip()
            and self.integrations.crm_access_token.strip()
        )
