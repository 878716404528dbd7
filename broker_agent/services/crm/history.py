"""Conversation history from the GoHighLevel (LeadConnector) CRM."""

from datetime import datetime, timezone
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from broker_agent.core.config import CRMConfig, settings
from broker_agent.core.exceptions import ProviderRejected, ProviderTransportError
from broker_agent.models import (
    ConversationHistory,
    DataSource,
    DisplayMessage,
    Sender,
    TranscriptEntry,
    TranscriptRole,
)

logger = structlog.get_logger()

PROVIDER_NAME = "ghl"

MOCK_HISTORY_TEXT = "This is a simulated CRM history (no credentials provided)."
MEDIA_PLACEHOLDER = "[Media/Template Message]"


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # LeadConnector sometimes returns epoch milliseconds
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            pass
    return datetime.now(timezone.utc)


def _message_text(body: Any) -> str:
    if body is None or body == "":
        return MEDIA_PLACEHOLDER
    return body if isinstance(body, str) else str(body)


class ConversationHistoryService:
    """Fetches recent conversations for a CRM location.

    Each conversation's last message becomes one display message and one
    parallel transcript entry, oldest first.
    """

    def __init__(
        self,
        config: CRMConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or settings.crm
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout_seconds)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch(self, location_id: str, access_token: str) -> ConversationHistory:
        """Fetch history for a location.

        Args:
            location_id: CRM location (sub-account) id
            access_token: CRM private integration / OAuth token

        Returns:
            ConversationHistory; a mock one when credentials are blank

        Raises:
            ProviderRejected: CRM answered with a non-success status or a
                payload that cannot be mapped
            ProviderTransportError: CRM unreachable or timed out
        """
        if not location_id or not location_id.strip() or not access_token or not access_token.strip():
            logger.warning("CRM credentials missing, returning mock history")
            return self._mock_history()

        url = f"{self.config.base_url.rstrip('/')}/conversations/search"
        logger.info("Fetching CRM history", provider=PROVIDER_NAME, location_id=location_id)

        try:
            response = await self._get_client().get(
                url,
                params={
                    "locationId": location_id,
                    "limit": self.config.history_limit,
                    "sort": "desc",
                },
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Version": self.config.api_version,
                    "Accept": "application/json",
                },
                timeout=self.config.timeout_seconds,
            )
        except httpx.TransportError as e:
            logger.error("CRM request failed", provider=PROVIDER_NAME, error=repr(e))
            raise ProviderTransportError(PROVIDER_NAME, e) from e

        if not response.is_success:
            logger.warning(
                "CRM rejected history request",
                provider=PROVIDER_NAME,
                status_code=response.status_code,
            )
            raise ProviderRejected(PROVIDER_NAME, response.status_code, response.text)

        try:
            data = response.json()
        except ValueError:
            raise ProviderRejected(PROVIDER_NAME, response.status_code, response.text[:500])

        conversations = data.get("conversations") if isinstance(data, dict) else None
        try:
            history = self.parse_conversations(conversations if isinstance(conversations, list) else [])
        except (ValidationError, TypeError, ValueError) as e:
            logger.error("CRM history unparseable", provider=PROVIDER_NAME, error=str(e))
            raise ProviderRejected(PROVIDER_NAME, response.status_code, f"unparseable history: {e}") from e

        logger.info(
            "CRM history fetched",
            provider=PROVIDER_NAME,
            messages=len(history.display),
        )
        return history

    @staticmethod
    def parse_conversations(conversations: list[Any]) -> ConversationHistory:
        """Turn provider conversations (newest first) into chronological history."""
        display: list[DisplayMessage] = []
        transcript: list[TranscriptEntry] = []

        for conv in reversed(conversations):
            if not isinstance(conv, dict):
                continue
            last_message = conv.get("lastMessage")
            if not isinstance(last_message, dict):
                continue

            is_user = last_message.get("direction") == "inbound"
            text = _message_text(last_message.get("body"))

            display.append(
                DisplayMessage(
                    id=str(conv.get("id") or len(display)),
                    text=text,
                    sender=Sender.USER if is_user else Sender.AGENT,
                    timestamp=_parse_timestamp(last_message.get("dateAdded")),
                )
            )
            transcript.append(
                TranscriptEntry(
                    role=TranscriptRole.USER if is_user else TranscriptRole.MODEL,
                    text=text,
                )
            )

        return ConversationHistory(display=display, transcript=transcript, source=DataSource.LIVE)

    @staticmethod
    def _mock_history() -> ConversationHistory:
        return ConversationHistory(
            display=[DisplayMessage.system(MOCK_HISTORY_TEXT, message_id="mock_1")],
            transcript=[],
            source=DataSource.MOCK,
        )


# Singleton instance
_history_service: ConversationHistoryService | None = None


def get_history_service() -> ConversationHistoryService:
    """Get or create the conversation history service singleton."""
    global _history_service
    if _history_service is None:
        _history_service = ConversationHistoryService()
    return _history_service
