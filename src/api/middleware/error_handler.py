"""Global exception handlers for the FastAPI application.

Every failure raised while handling a request ends here and leaves as the
same JSON envelope, ``{"error": ..., "message": ...}``:

| Failure                                   | Status    | error                   |
|-------------------------------------------|-----------|-------------------------|
| ResourceNotFound                          | 404       | Not Found               |
| UpstreamError, UpstreamUnavailable        | 502       | External API Error      |
| ValidationError, RequestValidationError   | 400       | Bad Request             |
| ConflictError                             | 409       | Conflict                |
| HTTPException (routing, auth)             | its own   | HTTP Error              |
| anything else                             | 500       | Internal Server Error   |
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from src.api.schemas.errors import ErrorResponse
from src.api.utils.responses import ORJSONResponse
from src.core.context import RequestContext
from src.core.error_context import sanitize_error_context, sanitize_value
from src.core.exceptions import (
    ConflictError,
    GatewayError,
    ResourceNotFound,
    UpstreamError,
    ValidationError,
)

NOT_FOUND = "Not Found"
EXTERNAL_API_ERROR = "External API Error"
BAD_REQUEST = "Bad Request"
CONFLICT = "Conflict"
HTTP_ERROR = "HTTP Error"
INTERNAL_SERVER_ERROR = "Internal Server Error"

# Checked in order; the first matching class wins
GATEWAY_ERROR_STATUS: tuple[tuple[type[GatewayError], int, str], ...] = (
    (ResourceNotFound, status.HTTP_404_NOT_FOUND, NOT_FOUND),
    (UpstreamError, status.HTTP_502_BAD_GATEWAY, EXTERNAL_API_ERROR),
    (ValidationError, status.HTTP_400_BAD_REQUEST, BAD_REQUEST),
    (ConflictError, status.HTTP_409_CONFLICT, CONFLICT),
)


def classify_gateway_error(exc: GatewayError) -> tuple[int, str]:
    """Return the HTTP status and error label for a gateway exception.

    Args:
        exc: The exception to classify.

    Returns:
        tuple[int, str]: Status code and ``error`` label.
    """
    for error_type, status_code, label in GATEWAY_ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code, label
    return status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_SERVER_ERROR


def build_error_response(
    status_code: int,
    error: str,
    message: str,
    details: dict[str, object] | None = None,
    headers: dict[str, str] | None = None,
) -> ORJSONResponse:
    """Serialize the error envelope, omitting ``details`` when empty.

    Args:
        status_code: HTTP status of the response.
        error: Error category label.
        message: Human-readable message.
        details: Optional structured details.
        headers: Extra response headers.

    Returns:
        ORJSONResponse: The error response.
    """
    body = ErrorResponse(error=error, message=message, details=details or None)
    return ORJSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


async def gateway_error_handler(request: Request, exc: Exception) -> Response:
    """Handle GatewayError exceptions raised by the client, services or handlers.

    Args:
        request: The request that caused the exception.
        exc: The GatewayError to handle.

    Returns:
        Response: Error envelope with the mapped status.

    Raises:
        TypeError: If exc is not a GatewayError instance.
    """
    if not isinstance(exc, GatewayError):
        raise TypeError(f"Expected GatewayError, got {type(exc).__name__}")

    status_code, label = classify_gateway_error(exc)
    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
            "error_code": exc.error_code,
        },
    )

    log = logger.warning if exc.is_expected else logger.error
    log(
        "Handling {exception_type}: {message}",
        exception_type=type(exc).__name__,
        message=exc.message,
        correlation_id=RequestContext.get_correlation_id(),
        status_code=status_code,
        **error_context,
    )

    details = None
    if isinstance(exc, ValidationError) and exc.context:
        details = sanitize_value(exc.context)

    return build_error_response(status_code, label, exc.message, details)


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle FastAPI RequestValidationError exceptions with field-level details.

    Args:
        request: The request that caused the exception.
        exc: The RequestValidationError to handle.

    Returns:
        Response: 400 envelope with ``details.validation_errors``.

    Raises:
        TypeError: If exc is not a RequestValidationError instance.
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        # ('body', 'email') -> 'email'
        field_path = error.get("loc", ())
        field_name = ".".join(str(loc) for loc in field_path[1:] if loc != "__root__")
        field_errors.setdefault(field_name or "root", []).append(
            error.get("msg", "Invalid value")
        )

    error_context = sanitize_error_context(
        exc,
        {
            "path": str(request.url.path),
            "method": request.method,
            "validation_errors": field_errors,
        },
    )
    logger.warning(
        "Request validation failed",
        correlation_id=RequestContext.get_correlation_id(),
        status_code=status.HTTP_400_BAD_REQUEST,
        **error_context,
    )

    return build_error_response(
        status.HTTP_400_BAD_REQUEST,
        BAD_REQUEST,
        "Request validation failed",
        {"validation_errors": field_errors},
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette HTTPException, keeping its status and headers.

    Covers routing misses (404, 405) and the 401/403 raised by the
    authentication dependencies.

    Args:
        request: The request that caused the exception.
        exc: The HTTPException to handle.

    Returns:
        Response: Error envelope labelled ``HTTP Error``.

    Raises:
        TypeError: If exc is not an HTTPException instance.
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    error_context = sanitize_error_context(
        exc,
        {
            "status": exc.status_code,
            "method": request.method,
            "path": str(request.url.path),
        },
    )
    logger.warning(
        "HTTP exception",
        correlation_id=RequestContext.get_correlation_id(),
        **error_context,
    )

    return build_error_response(
        exc.status_code,
        HTTP_ERROR,
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle any exception no other handler claimed.

    Args:
        request: The request that caused the exception.
        exc: The unhandled exception.

    Returns:
        Response: 500 envelope.
    """
    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
        },
    )
    logger.exception(
        "Unhandled exception: {exception_type}",
        exception_type=type(exc).__name__,
        correlation_id=RequestContext.get_correlation_id(),
        **error_context,
    )

    message = str(exc) or f"Internal server error: {type(exc).__name__}"

    return build_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_SERVER_ERROR, message
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
