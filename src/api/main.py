"""FastAPI application initialization and configuration module.

This module builds the gateway application:
- Application lifecycle (database check, shared upstream client)
- Exception handlers, then middleware, then routers
- The API index, health check and info endpoints
- OpenTelemetry instrumentation

Middleware execute in reverse order of registration.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated, Any, cast

from fastapi import Depends, FastAPI, Request
from loguru import logger

from src.api.middleware.error_handler import register_exception_handlers
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.middleware.request_logging import RequestLoggingMiddleware
from src.api.routes import (
    RESOURCE_DEFINITIONS,
    ResourceDefinition,
    auth_router,
    build_resource_router,
    users_router,
)
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.logging import setup_logging
from src.core.observability import instrument_app, setup_tracing
from src.infrastructure.database.session import (
    check_database_connection,
    close_database,
    get_engine,
)
from src.infrastructure.upstream import (
    RickMortyClient,
    close_upstream_client,
    create_upstream_http_client,
)

API_DESCRIPTION = "A gateway in front of the public Rick and Morty REST API"

# Sample filter values shown in the API index
EXAMPLE_FILTERS: dict[str, str] = {
    "characters": "name=rick&status=alive",
    "locations": "name=earth&type=planet",
    "episodes": "name=pilot&episode=S01E01",
}


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Args:
        app_instance: The FastAPI application instance.

    Yields:
        None: Nothing is yielded, this is just a lifespan context.

    Raises:
        RuntimeError: If database connection fails during startup.
    """
    settings: Settings = app_instance.state.settings

    is_healthy, error_msg = await check_database_connection()
    if is_healthy:
        logger.info("Database connection successful")
    else:
        logger.error("Database connection failed during startup: {}", error_msg)
        msg = f"Database connection failed: {error_msg}"
        raise RuntimeError(msg)

    http_client = create_upstream_http_client(settings)
    app_instance.state.rick_morty_client = RickMortyClient(
        http_client, settings.upstream_config.base_url
    )

    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
    )

    try:
        yield
    finally:
        logger.info("Application shutdown initiated")
        await close_upstream_client(http_client)
        await close_database()
        logger.info("Application shutdown complete")


def build_api_index(
    settings: Settings,
    base_url: str,
    definitions: tuple[ResourceDefinition, ...] = RESOURCE_DEFINITIONS,
) -> dict[str, Any]:
    """Describe every proxied endpoint, its filters and a few example URLs.

    Args:
        settings: Application settings (name and version).
        base_url: Public base URL used in the examples, without trailing slash.
        definitions: Exposed resources.

    Returns:
        dict[str, Any]: The index document served at ``/``.
    """
    endpoints: dict[str, dict[str, str]] = {}
    filters: dict[str, list[str]] = {}
    for definition in definitions:
        prefix, name = definition.prefix, definition.tag
        example_filter = EXAMPLE_FILTERS.get(name, f"{definition.filter_keys[0]}=x")
        endpoints[name] = {
            "list": f"GET {prefix}",
            "list_with_pagination": f"GET {prefix}?page=2",
            "list_with_filters": f"GET {prefix}?{example_filter}",
            "single": f"GET {prefix}/{{id}}",
            "multiple": f"GET {prefix}/multiple?ids=1,2,3",
        }
        filters[name] = list(definition.filter_keys)

    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": API_DESCRIPTION,
        "endpoints": endpoints,
        "filters": filters,
        "examples": {
            "Get all characters": f"{base_url}/api/characters",
            "Get Rick Sanchez": f"{base_url}/api/characters/1",
            "Search alive Ricks": f"{base_url}/api/characters?name=rick&status=alive",
            "Get multiple characters": f"{base_url}/api/characters/multiple?ids=1,2,3",
            "Get all locations": f"{base_url}/api/locations",
            "Get all episodes": f"{base_url}/api/episodes",
        },
    }


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)
    setup_tracing(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=API_DESCRIPTION,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    application.state.settings = settings

    # Exception handlers BEFORE middleware
    register_exception_handlers(application)

    # 2. Request logging middleware (logs requests/responses)
    application.add_middleware(RequestLoggingMiddleware, log_config=settings.log_config)

    # 1. Request context middleware (creates correlation ID)
    application.add_middleware(RequestContextMiddleware)

    for definition in RESOURCE_DEFINITIONS:
        application.include_router(build_resource_router(definition))
    application.include_router(auth_router)
    application.include_router(users_router)

    @application.get("/", tags=["meta"])
    async def index(request: Request) -> dict[str, Any]:
        """API index listing every endpoint, filter and a few examples."""
        return build_api_index(settings, str(request.base_url).rstrip("/"))

    @application.get("/health", tags=["meta"])
    async def health() -> dict[str, object]:
        """Health check endpoint for monitoring and container orchestration.

        Returns:
            dict[str, object]: Status (healthy or degraded) and database
                connectivity.
        """
        health_status: dict[str, object] = {"status": "healthy", "database": False}

        is_healthy, error_msg = await check_database_connection()
        health_status["database"] = is_healthy

        if is_healthy:
            pool = cast("Any", get_engine().pool)
            logger.bind(
                metric_type="db.pool.health",
                checked_out=pool.checkedout(),
                size=pool.size(),
                overflow=pool.overflow(),
            ).info("Database pool health check")
        else:
            # Reported as degraded rather than down; the upstream proxy still works
            logger.warning("Database health check failed: {}", error_msg)
            health_status["status"] = "degraded"

        return health_status

    @application.get("/info", tags=["meta"])
    async def info(
        app_settings: Annotated[Settings, Depends(get_settings)],
    ) -> dict[str, Any]:
        """Get application information.

        Args:
            app_settings: Application settings injected via dependency.

        Returns:
            dict[str, Any]: Application name, version, environment and debug flag.
        """
        return {
            "app_name": app_settings.app_name,
            "version": app_settings.app_version,
            "environment": app_settings.environment,
            "debug": app_settings.debug,
        }

    instrument_app(application, settings)

    return application


app = create_app()
