"""Client for the proxied Rick and Morty REST API."""

from src.infrastructure.upstream.client import RickMortyClient
from src.infrastructure.upstream.resources import RESOURCE_FILTERS, Resource
from src.infrastructure.upstream.session import (
    close_upstream_client,
    create_upstream_http_client,
)

__all__ = [
    "RESOURCE_FILTERS",
    "Resource",
    "RickMortyClient",
    "close_upstream_client",
    "create_upstream_http_client",
]
