"""Core module - configuration and utilities."""

from broker_agent.core.config import Settings, get_settings, settings
from broker_agent.core.exceptions import (
    AgentError,
    AgentInitError,
    AppException,
    ConfigurationError,
    IntegrationError,
    ModelUnavailableError,
    ProviderRejected,
    ProviderTransportError,
    SessionNotFound,
    TenantNotFound,
)
from broker_agent.core.logging import configure_logging

__all__ = [
    "settings",
    "Settings",
    "get_settings",
    "configure_logging",
    "AppException",
    "AgentError",
    "AgentInitError",
    "ConfigurationError",
    "IntegrationError",
    "ModelUnavailableError",
    "ProviderRejected",
    "ProviderTransportError",
    "SessionNotFound",
    "TenantNotFound",
]
