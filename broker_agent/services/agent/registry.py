"""In-process registry of live agent sessions."""

from collections import OrderedDict

import structlog

from broker_agent.core.config import Settings, settings as default_settings
from broker_agent.core.exceptions import SessionNotFound
from broker_agent.models import Tenant
from broker_agent.services.agent.session import AgentSession
from broker_agent.services.crm.history import ConversationHistoryService
from broker_agent.services.listings.search import PropertySearchService
from broker_agent.services.llm.provider import ChatModel, LLMProvider

logger = structlog.get_logger()


class SessionRegistry:
    """Holds sessions by id until the conversation is discarded.

    Sessions are evicted oldest-first when ``max_sessions`` is exceeded.
    """

    def __init__(
        self,
        config: Settings | None = None,
        chat_model: ChatModel | None = None,
        search_service: PropertySearchService | None = None,
        history_service: ConversationHistoryService | None = None,
    ) -> None:
        self.settings = config or default_settings
        # One model client shared by every session
        self.chat_model = chat_model or LLMProvider(
            api_key=self.settings.llm.api_key,
            config=self.settings.llm,
        )
        self.search_service = search_service
        self.history_service = history_service
        self.max_sessions = self.settings.max_live_sessions
        self._sessions: OrderedDict[str, AgentSession] = OrderedDict()

    def create(self, tenant: Tenant) -> AgentSession:
        """Create and register a session for a tenant."""
        session = AgentSession(
            tenant,
            chat_model=self.chat_model,
            search_service=self.search_service,
            history_service=self.history_service,
            config=self.settings,
        )
        self._sessions[session.id] = session

        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info("Evicted agent session", session_id=evicted_id)

        logger.info("Created agent session", session_id=session.id, tenant_id=tenant.id)
        return session

    def get(self, session_id: str) -> AgentSession:
        """Get a live session.

        Raises:
            SessionNotFound: Unknown or discarded session
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def discard(self, session_id: str) -> bool:
        """Drop a session. Returns False if it was not registered."""
        removed = self._sessions.pop(session_id, None)
        if removed is not None:
            logger.info("Discarded agent session", session_id=session_id)
        return removed is not None

    def __len__(self) -> int:
        return len(self._sessions)
