"""
Centralized error mapping for FastAPI.

Translates use-case error kinds into HTTP responses, and registers
exception handlers for request validation and for anything that
escapes a route. No stack traces or internal details are exposed
to clients. All error responses use the ErrorResponse schema.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.application.result import AppError, ErrorKind
from app.domain.ordering.errors import InfrastructureError, OrderingDomainError

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_404 = 404
HTTP_409 = 409
HTTP_500 = 500
HTTP_503 = 503

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: HTTP_400,
    ErrorKind.NOT_FOUND: HTTP_404,
    ErrorKind.CONFLICT: HTTP_409,
    ErrorKind.INFRASTRUCTURE: HTTP_500,
}


def status_for(kind: ErrorKind) -> int:
    """Return the HTTP status for an error kind (503 when unclassified)."""
    return STATUS_BY_KIND.get(kind, HTTP_503)


def _error_response(
    status_code: int,
    error: str,
    kind: str,
    details: dict[str, str] | None = None,
    resource: str | None = None,
    id: str | None = None,
) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, object] = {"error": error, "kind": kind}
    if details:
        body["details"] = details
    if resource:
        body["resource"] = resource
    if id is not None:
        body["id"] = id
    return JSONResponse(status_code=status_code, content=body)


def _internal_error() -> JSONResponse:
    return _error_response(
        HTTP_500, "Internal server error", ErrorKind.INFRASTRUCTURE.value
    )


def app_error_response(error: AppError) -> JSONResponse:
    """Translate a use-case error into an HTTP response."""
    status_code = status_for(error.kind)
    if status_code >= HTTP_500:
        # Backend messages stay in the logs.
        logger.error("Request failed (%s): %s", error.kind.value, error.message)
        message = (
            "Service unavailable" if status_code == HTTP_503 else "Internal server error"
        )
        return _error_response(status_code, message, error.kind.value)
    return _error_response(
        status_code,
        error.message,
        error.kind.value,
        details=error.details,
        resource=error.resource,
        id=error.id,
    )


def _validation_details(exc: RequestValidationError) -> dict[str, str]:
    details: dict[str, str] = {}
    for err in exc.errors():
        loc = [
            str(part)
            for part in err.get("loc", ())
            if part not in ("body", "path", "query")
        ]
        details[".".join(loc) or "body"] = err.get("msg", "Invalid value")
    return details


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Answer malformed request bodies as validation errors."""
        details = _validation_details(exc)
        logger.warning("Rejected malformed request: %s", sorted(details))
        return _error_response(
            HTTP_400, "Invalid input", ErrorKind.VALIDATION.value, details=details
        )

    @app.exception_handler(OrderingDomainError)
    async def handle_ordering_domain(
        _request: Request, exc: OrderingDomainError
    ) -> JSONResponse:
        """Catch-all for domain errors that escaped a use case."""
        logger.error("Unhandled ordering domain error: %s", exc.message)
        return _internal_error()

    @app.exception_handler(InfrastructureError)
    async def handle_infrastructure(
        _request: Request, exc: InfrastructureError
    ) -> JSONResponse:
        """Catch-all for backend failures that escaped a use case."""
        logger.error("Unhandled infrastructure error: %s", exc.message)
        return _internal_error()

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _internal_error()
