"""Storage layer - tenant store interface and in-memory implementation."""

from broker_agent.storage.base import TenantStore
from broker_agent.storage.memory import InMemoryTenantStore

__all__ = ["TenantStore", "InMemoryTenantStore"]
