"""Lifecycle of the shared httpx client used for upstream calls.

One ``httpx.AsyncClient`` is created at application startup and shared by
every request so connections to the upstream are pooled by httpx itself.
"""

import httpx
from loguru import logger

from src.core.config import Settings


def create_upstream_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the shared upstream HTTP client.

    The httpx default timeout is kept on purpose; callers that need stricter
    deadlines add their own.

    Args:
        settings: Application settings.

    Returns:
        httpx.AsyncClient: A client ready to be wrapped by ``RickMortyClient``.
    """
    client = httpx.AsyncClient(
        headers={
            "Accept": "application/json",
            "User-Agent": f"{settings.app_name}/{settings.app_version}",
        },
    )
    logger.info(
        "Created upstream HTTP client for {}", settings.upstream_config.base_url
    )
    return client


async def close_upstream_client(client: httpx.AsyncClient) -> None:
    """Close the shared upstream HTTP client and its pooled connections.

    Args:
        client: The client created by ``create_upstream_http_client``.
    """
    await client.aclose()
    logger.info("Upstream HTTP client closed")
