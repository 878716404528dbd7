"""Mapping of application exceptions to HTTP responses."""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from broker_agent.core.exceptions import (
    AgentError,
    AppException,
    SessionNotFound,
    TenantNotFound,
)
from broker_agent.models import DecisionLog, LogKind

logger = structlog.get_logger()

NOT_FOUND_ERRORS = (TenantNotFound, SessionNotFound)


def _error_body(exc: AppException, include_details: bool = True) -> dict:
    body = {"error": exc.code, "message": exc.message}
    if include_details:
        body["details"] = exc.details
    return body


async def agent_error_handler(request: Request, exc: AgentError) -> JSONResponse:
    """A failed turn: the caller gets the generic message, operators get the log."""
    logger.error(
        "Agent turn failed",
        path=request.url.path,
        code=exc.code,
        failures=[entry.label for entry in DecisionLog(exc.log).of_kind(LogKind.ERROR)],
        decision_log=[entry.model_dump(mode="json") for entry in exc.log],
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=_error_body(exc, include_details=False),
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle application-specific exceptions."""
    logger.warning(
        "Application exception",
        path=request.url.path,
        code=exc.code,
        message=exc.message,
        details=exc.details,
    )
    status_code = (
        status.HTTP_404_NOT_FOUND
        if isinstance(exc, NOT_FOUND_ERRORS)
        else status.HTTP_400_BAD_REQUEST
    )
    return JSONResponse(status_code=status_code, content=_error_body(exc))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error("Unhandled exception", path=request.url.path, error=str(exc), exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers; the most specific class wins."""
    app.add_exception_handler(AgentError, agent_error_handler)
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
