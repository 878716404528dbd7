"""Agent service - sessions, tool registry and orchestration loop."""

from broker_agent.services.agent.prompts import build_system_prompt
from broker_agent.services.agent.registry import SessionRegistry
from broker_agent.services.agent.session import AgentSession
from broker_agent.services.agent.tools import TOOL_REGISTRY, tool_schemas

__all__ = [
    "AgentSession",
    "SessionRegistry",
    "TOOL_REGISTRY",
    "build_system_prompt",
    "tool_schemas",
]
