"""Message models: display-facing history and model-facing transcript."""

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field

from broker_agent.models.property import DataSource


class Sender(str, Enum):
    """Who a display message is attributed to."""

    USER = "user"
    AGENT = "agent"
    SYSTEM = "system"


class TranscriptRole(str, Enum):
    """Role of a transcript entry as the model sees it."""

    USER = "user"
    MODEL = "model"


class DisplayMessage(BaseModel):
    """Message as shown to a human operator or end user."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    text: str
    sender: Sender
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def system(cls, text: str, message_id: str | None = None) -> "DisplayMessage":
        return cls(id=message_id or uuid4().hex, text=text, sender=Sender.SYSTEM)


class TranscriptEntry(BaseModel):
    """One prior turn used to seed the model context."""

    role: TranscriptRole
    text: str

    def to_llm_message(self) -> dict[str, str]:
        """Convert to chat-completion message format."""
        if self.role == TranscriptRole.USER:
            return {"role": "user", "content": self.text}
        return {"role": "assistant", "content": self.text}


class ConversationHistory(BaseModel):
    """Prior conversation fetched from the CRM, in both forms."""

    display: list[DisplayMessage] = Field(default_factory=list)
    transcript: list[TranscriptEntry] = Field(default_factory=list)
    source: DataSource = DataSource.LIVE
