"""Data models for the application."""

from broker_agent.models.conversation import (
    ConversationTurn,
    DecisionLog,
    DecisionLogEntry,
    LogKind,
    SessionStart,
    TurnResult,
)
from broker_agent.models.message import (
    ConversationHistory,
    DisplayMessage,
    Sender,
    TranscriptEntry,
    TranscriptRole,
)
from broker_agent.models.property import (
    DataSource,
    OperationType,
    Property,
    PropertySearchFilter,
    PropertySearchResult,
)
from broker_agent.models.tenant import (
    AgentPersona,
    AgentTone,
    IntegrationCredentials,
    Tenant,
    TenantStatus,
)

__all__ = [
    # Tenant
    "Tenant",
    "TenantStatus",
    "AgentPersona",
    "AgentTone",
    "IntegrationCredentials",
    # Property
    "Property",
    "PropertySearchFilter",
    "PropertySearchResult",
    "OperationType",
    "DataSource",
    # Message
    "DisplayMessage",
    "Sender",
    "TranscriptEntry",
    "TranscriptRole",
    "ConversationHistory",
    # Conversation
    "ConversationTurn",
    "DecisionLog",
    "DecisionLogEntry",
    "LogKind",
    "SessionStart",
    "TurnResult",
]
