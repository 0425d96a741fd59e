"""HTTP routers: resource proxies, registration and user administration."""

from src.api.routes.auth import router as auth_router
from src.api.routes.resources import (
    RESOURCE_DEFINITIONS,
    ResourceDefinition,
    ResourceProxy,
    build_resource_router,
)
from src.api.routes.users import router as users_router

__all__ = [
    "RESOURCE_DEFINITIONS",
    "ResourceDefinition",
    "ResourceProxy",
    "auth_router",
    "build_resource_router",
    "users_router",
]
