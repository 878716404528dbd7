"""API routes."""

from broker_agent.api.routes.health import router as health_router
from broker_agent.api.routes.sessions import router as sessions_router

__all__ = ["health_router", "sessions_router"]
