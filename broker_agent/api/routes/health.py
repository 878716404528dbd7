"""Health check endpoints."""

from datetime import datetime
from typing import Any

import structlog
from fastapi import APIRouter

from broker_agent.api.dependencies import RegistryDep, SettingsDep, StoreDep

logger = structlog.get_logger()

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
@router.get("/")
async def health_check(config: SettingsDep) -> dict[str, Any]:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": config.app_env,
    }


@router.get("/ready")
async def readiness_check(
    store: StoreDep,
    registry: RegistryDep,
    config: SettingsDep,
) -> dict[str, Any]:
    """Readiness check.

    A missing model API key makes the service degraded: sessions can be
    created but cannot start. Listings and CRM credentials are per tenant and
    not checked here.
    """
    try:
        store_ok = await store.health_check()
    except Exception as e:
        logger.warning("Tenant store health check failed", error=str(e))
        store_ok = False

    checks = {
        "tenant_store": store_ok,
        "llm_api_key": bool(config.llm.api_key),
    }

    return {
        "status": "ready" if all(checks.values()) else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "checks": checks,
        "live_sessions": len(registry),
    }


@router.get("/live")
async def liveness_check() -> dict[str, str]:
    """Liveness check - basic endpoint for kubernetes probes."""
    return {"status": "alive"}
