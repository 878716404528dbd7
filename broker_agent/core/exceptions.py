"""Custom exceptions for the application."""

from typing import Any


class AppException(Exception):
    """Base exception for application errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ConfigurationError(AppException):
    """Raised when there's a configuration problem."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR", details=details)


class TenantNotFound(AppException):
    """Raised when a tenant is not found."""

    def __init__(self, tenant_id: str) -> None:
        super().__init__(
            f"Tenant not found: {tenant_id}",
            code="TENANT_NOT_FOUND",
            details={"tenant_id": tenant_id},
        )


class SessionNotFound(AppException):
    """Raised when a session id is unknown or already discarded."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            f"Session not found: {session_id}",
            code="SESSION_NOT_FOUND",
            details={"session_id": session_id},
        )


class IntegrationError(AppException):
    """Raised when an external provider (listings, CRM) fails."""

    def __init__(
        self,
        message: str,
        provider: str,
        code: str = "INTEGRATION_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            details={"provider": provider, **(details or {})},
        )
        self.provider = provider


class ProviderRejected(IntegrationError):
    """Raised when a provider answers with a non-success HTTP status or an
    unusable payload."""

    def __init__(self, provider: str, status_code: int, body: str) -> None:
        super().__init__(
            f"{provider} API error [{status_code}]: {body}",
            provider=provider,
            code="PROVIDER_REJECTED",
            details={"status_code": status_code, "body": body},
        )
        self.status_code = status_code
        self.body = body


class ProviderTransportError(IntegrationError):
    """Raised when a provider cannot be reached (network failure or timeout)."""

    def __init__(self, provider: str, cause: Exception) -> None:
        super().__init__(
            f"{provider} API unreachable: {cause!r}",
            provider=provider,
            code="PROVIDER_TRANSPORT_ERROR",
            details={"cause": repr(cause)},
        )
        self.cause = cause


class ModelUnavailableError(AppException):
    """Raised when the language model call itself fails."""

    def __init__(self, message: str, model: str | None = None) -> None:
        super().__init__(
            message,
            code="MODEL_UNAVAILABLE",
            details={"model": model} if model else {},
        )


class AgentError(AppException):
    """User-safe failure of a conversation turn.

    The message never carries the underlying cause; that lives in ``log``.
    """

    USER_MESSAGE = "The assistant is temporarily unavailable. Please try again in a moment."

    def __init__(self, log: list[Any] | None = None, code: str = "AGENT_UNAVAILABLE") -> None:
        super().__init__(self.USER_MESSAGE, code=code)
        self.log = log or []


class AgentInitError(AgentError):
    """Raised when a session cannot open its model dialogue."""

    def __init__(self, log: list[Any] | None = None) -> None:
        super().__init__(log=log, code="AGENT_INIT_FAILED")
