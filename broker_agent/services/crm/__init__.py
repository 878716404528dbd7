"""CRM service - conversation history import."""

from broker_agent.services.crm.history import ConversationHistoryService, get_history_service

__all__ = ["ConversationHistoryService", "get_history_service"]
