"""LLM service - multi-provider abstraction using LiteLLM."""

from broker_agent.services.llm.provider import (
    ChatModel,
    Dialogue,
    LLMProvider,
    ModelReply,
    ToolCall,
    ToolResult,
)

__all__ = [
    "ChatModel",
    "Dialogue",
    "LLMProvider",
    "ModelReply",
    "ToolCall",
    "ToolResult",
]
