"""Request/response logging with timing.

Each request produces a "Request started" and a "Request completed" (or
"Request failed") record carrying method, path, status and duration. The
``X-Request-ID`` header is reused or generated and returned on the response.
Requests slower than ``log_config.slow_request_threshold_ms`` also emit a
warning. Paths listed in ``log_config.excluded_paths`` are not logged.
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from src.core.config import LogConfig, get_settings
from src.core.context import generate_request_id

REQUEST_ID_HEADER = "X-Request-ID"
MAX_USER_AGENT_LENGTH = 200


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its timing.

    Args:
        app: The ASGI application.
        log_config: Logging configuration.
    """

    def __init__(self, app: ASGIApp, *, log_config: LogConfig) -> None:
        super().__init__(app)
        self.log_config = log_config
        self.excluded_paths = set(log_config.excluded_paths)
        self.settings = get_settings()

    def _get_client_ip(self, request: Request) -> str:
        # Proxy headers are only trusted behind the production load balancer
        if self.settings.environment == "production":
            if forwarded_for := request.headers.get("x-forwarded-for"):
                return forwarded_for.split(",")[0].strip()
            if real_ip := request.headers.get("x-real-ip"):
                return real_ip.strip()

        if request.client:
            return request.client.host
        return "unknown"

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process the request and log it.

        Args:
            request: The incoming request.
            call_next: The next middleware/endpoint.

        Returns:
            Response: The response from the application.
        """
        if request.url.path in self.excluded_paths:
            return await call_next(request)

        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        user_agent = request.headers.get("user-agent", "")[:MAX_USER_AGENT_LENGTH]

        with logger.contextualize(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_host=self._get_client_ip(request),
            user_agent=user_agent or "unknown",
        ):
            logger.info(
                "Request started",
                query_params=(
                    dict(request.query_params) if request.query_params else None
                ),
            )
            start_time = time.perf_counter()

            try:
                response = await call_next(request)
            except Exception as exc:
                logger.error(
                    "Request failed",
                    duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                    error_type=type(exc).__name__,
                )
                raise

            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=duration_ms,
            )
            response.headers[REQUEST_ID_HEADER] = request_id

            if duration_ms > self.log_config.slow_request_threshold_ms:
                logger.warning(
                    "Slow request detected",
                    duration_ms=duration_ms,
                    threshold_ms=self.log_config.slow_request_threshold_ms,
                )

            return response
