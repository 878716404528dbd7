"""Conversation models: turn results and the decision log."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from broker_agent.models.message import DisplayMessage, TranscriptEntry
from broker_agent.models.property import Property


class LogKind(str, Enum):
    """Kind of orchestration event."""

    INFO = "info"
    TOOL_CALL = "tool_call"
    API_REQUEST = "api_request"
    ERROR = "error"


class DecisionLogEntry(BaseModel):
    """One orchestration event, recorded for observability only."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    kind: LogKind
    label: str
    payload: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class DecisionLog(list):
    """Append-only list of DecisionLogEntry with shorthand recorders."""

    def record(self, kind: LogKind, label: str, **payload: Any) -> DecisionLogEntry:
        entry = DecisionLogEntry(kind=kind, label=label, payload=payload)
        self.append(entry)
        return entry

    def info(self, label: str, **payload: Any) -> DecisionLogEntry:
        return self.record(LogKind.INFO, label, **payload)

    def tool_call(self, label: str, **payload: Any) -> DecisionLogEntry:
        return self.record(LogKind.TOOL_CALL, label, **payload)

    def api_request(self, label: str, **payload: Any) -> DecisionLogEntry:
        return self.record(LogKind.API_REQUEST, label, **payload)

    def error(self, label: str, **payload: Any) -> DecisionLogEntry:
        return self.record(LogKind.ERROR, label, **payload)

    def of_kind(self, kind: LogKind) -> list[DecisionLogEntry]:
        return [entry for entry in self if entry.kind == kind]


class TurnResult(BaseModel):
    """What one call to send_message hands back to the caller."""

    text: str
    properties: list[Property] | None = None
    scheduling_link: str | None = None
    log: list[DecisionLogEntry] = Field(default_factory=list)


class ConversationTurn(BaseModel):
    """A completed exchange: the user utterance plus its TurnResult."""

    user_message: str
    reply: str
    properties: list[Property] | None = None
    scheduling_link: str | None = None
    log: list[DecisionLogEntry] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @classmethod
    def from_result(cls, user_message: str, result: TurnResult) -> "ConversationTurn":
        return cls(
            user_message=user_message,
            reply=result.text,
            properties=result.properties,
            scheduling_link=result.scheduling_link,
            log=result.log,
        )


class SessionStart(BaseModel):
    """History a session was seeded with."""

    display: list[DisplayMessage] = Field(default_factory=list)
    transcript: list[TranscriptEntry] = Field(default_factory=list)
