"""Correlation ID propagation.

The ``X-Correlation-ID`` request header is reused when present, otherwise a
new UUID4 is generated. The id is stored in contextvars for the exception
handlers and tracing hooks, bound to every Loguru record emitted while the
request runs, and echoed back on the response.
"""

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.core.context import RequestContext, generate_correlation_id

CORRELATION_ID_HEADER = "X-Correlation-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach a correlation ID to the request context and the response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Process the request with a correlation ID in scope.

        Args:
            request: The incoming request.
            call_next: The next middleware/endpoint.

        Returns:
            Response: Response with the correlation ID header.
        """
        correlation_id = (
            request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
        )
        RequestContext.set_correlation_id(correlation_id)

        with logger.contextualize(correlation_id=correlation_id):
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response
