"""Pytest configuration and fixtures."""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from broker_agent.api.dependencies import get_app_settings, get_session_registry, get_store
from broker_agent.api.main import create_app
from broker_agent.core.config import Settings
from broker_agent.models import (
    AgentPersona,
    AgentTone,
    IntegrationCredentials,
    Tenant,
    TenantStatus,
)
from broker_agent.services.agent.registry import SessionRegistry
from broker_agent.services.crm.history import ConversationHistoryService
from broker_agent.services.listings.search import PropertySearchService
from broker_agent.storage.memory import InMemoryTenantStore
from fakes import RecordingHandler, ScriptedChatModel


@pytest.fixture
def test_settings():
    """Settings isolated from the environment."""
    return Settings(_env_file=None, llm={"api_key": "test-key", "max_attempts": 1})


@pytest.fixture
def tenant():
    """Tenant with no integrations connected."""
    return Tenant(
        id="test-tenant",
        name="Elite Properties Buenos Aires",
        status=TenantStatus.ACTIVE,
        agent=AgentPersona(
            name="Sofia",
            tone=AgentTone.LUXURIOUS,
            model="gemini-2.5-flash",
            temperature=0.4,
            custom_instructions="Always mention 'exclusive amenities'.",
        ),
    )


@pytest.fixture
def connected_tenant():
    """Tenant with listings and CRM credentials."""
    return Tenant(
        id="connected-tenant",
        name="Urban Living Realty",
        status=TenantStatus.ACTIVE,
        integrations=IntegrationCredentials(
            listings_api_key="tk_live_112233",
            crm_location_id="loc_CABA_55",
            crm_access_token="ghl_pat_987654",
        ),
        agent=AgentPersona(name="Mateo", tone=AgentTone.FRIENDLY, temperature=0.8),
    )


@pytest.fixture
def chat_model():
    """Scripted model with an empty reply queue."""
    return ScriptedChatModel()


@pytest.fixture
def search_service():
    """Search service whose HTTP client must never be used."""
    handler = RecordingHandler(error=AssertionError("unexpected listings request"))
    return PropertySearchService(client=handler.client())


@pytest.fixture
def history_service():
    """History service whose HTTP client must never be used."""
    handler = RecordingHandler(error=AssertionError("unexpected CRM request"))
    return ConversationHistoryService(client=handler.client())


@pytest.fixture
def store():
    """Create in-memory tenant store for tests."""
    return InMemoryTenantStore()


@pytest.fixture
def registry(test_settings, chat_model, search_service, history_service):
    """Session registry wired to the scripted model."""
    return SessionRegistry(
        config=test_settings,
        chat_model=chat_model,
        search_service=search_service,
        history_service=history_service,
    )


@pytest_asyncio.fixture
async def demo_tenant(store, tenant):
    """Store the default tenant."""
    await store.save_tenant(tenant)
    return tenant


@pytest.fixture
def app(store, registry, test_settings):
    """Create test application."""
    application = create_app(test_settings)
    application.dependency_overrides[get_app_settings] = lambda: test_settings
    application.dependency_overrides[get_store] = lambda: store
    application.dependency_overrides[get_session_registry] = lambda: registry
    return application


@pytest_asyncio.fixture
async def client(app):
    """Create test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
