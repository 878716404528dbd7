"""Agent session endpoints: create, start, send message, discard."""

import structlog
from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel, Field

from broker_agent.api.dependencies import RegistryDep, StoreDep, load_tenant
from broker_agent.models import SessionStart, TenantStatus, TranscriptEntry, TurnResult

logger = structlog.get_logger()

router = APIRouter(prefix="/sessions", tags=["Sessions"])


# ==================== Pydantic Schemas ====================


class SessionCreate(BaseModel):
    """Schema for creating a session."""

    tenant_id: str


class SessionStartRequest(BaseModel):
    """Schema for starting a session.

    Omit ``history`` to import it from the tenant's CRM.
    """

    history: list[TranscriptEntry] | None = None


class MessageRequest(BaseModel):
    """Schema for a user message."""

    text: str = Field(..., min_length=1, max_length=4000)


class SessionResponse(BaseModel):
    """Response schema for a session."""

    session_id: str
    tenant_id: str
    agent_name: str
    started: bool


# ==================== Session Endpoints ====================


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    data: SessionCreate,
    store: StoreDep,
    registry: RegistryDep,
) -> SessionResponse:
    """Create a session for a tenant. No external calls are made."""
    tenant = await load_tenant(data.tenant_id, store)
    if tenant.status != TenantStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Tenant is not active: {tenant.id}",
        )

    session = registry.create(tenant)

    return SessionResponse(
        session_id=session.id,
        tenant_id=tenant.id,
        agent_name=tenant.agent.name,
        started=session.is_started,
    )


@router.post("/{session_id}/start", response_model=SessionStart)
async def start_session(
    session_id: str,
    registry: RegistryDep,
    data: SessionStartRequest | None = None,
) -> SessionStart:
    """Open the model dialogue, seeding it with prior history."""
    session = registry.get(session_id)
    return await session.start(data.history if data else None)


@router.post("/{session_id}/messages", response_model=TurnResult)
async def send_message(
    session_id: str,
    data: MessageRequest,
    registry: RegistryDep,
) -> TurnResult:
    """Run one conversation turn."""
    session = registry.get(session_id)
    result = await session.send_message(data.text)

    logger.info(
        "Processed session message",
        session_id=session_id,
        response_length=len(result.text),
        log_entries=len(result.log),
    )

    return result


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def discard_session(
    session_id: str,
    registry: RegistryDep,
) -> Response:
    """Discard a session when the conversation ends."""
    if not registry.discard(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session not found: {session_id}",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
