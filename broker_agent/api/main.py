"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from broker_agent.api.dependencies import get_session_registry, get_store
from broker_agent.api.errors import register_exception_handlers
from broker_agent.api.routes import health_router, sessions_router
from broker_agent.core.config import Settings, settings as default_settings
from broker_agent.core.logging import configure_logging
from broker_agent.services.crm.history import get_history_service
from broker_agent.services.listings.search import get_search_service
from broker_agent.storage.memory import InMemoryTenantStore

logger = structlog.get_logger()

API_VERSION = "0.1.0"


def _build_lifespan(config: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(
            "Starting Broker Agent API",
            environment=config.app_env,
            debug=config.app_debug,
            llm_configured=bool(config.llm.api_key),
        )

        store = get_store()
        if config.is_development and isinstance(store, InMemoryTenantStore):
            seeded = await store.seed_demo_tenants()
            logger.info("Seeded demo tenants", tenants=[t.id for t in seeded])

        yield

        await get_search_service().close()
        await get_history_service().close()
        logger.info("Shutting down Broker Agent API", live_sessions=len(get_session_registry()))

    return lifespan


def create_app(config: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or default_settings
    configure_logging(config.log_level, config.log_format)

    app = FastAPI(
        title="Broker Agent API",
        description="Real estate conversational agent with listings search and CRM history",
        version=API_VERSION,
        docs_url="/docs" if config.is_development else None,
        redoc_url="/redoc" if config.is_development else None,
        lifespan=_build_lifespan(config),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if config.is_development else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(sessions_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "service": "Broker Agent API",
            "version": API_VERSION,
            "status": "running",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "broker_agent.api.main:app",
        host=default_settings.app_host,
        port=default_settings.app_port,
        reload=default_settings.is_development,
    )
