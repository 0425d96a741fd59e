"""HTTP client for the public Rick and Morty REST API.

Every call goes straight to the upstream: there is no caching, no retry and
no timeout override beyond the httpx defaults. Outcomes are normalized into
the gateway exception taxonomy:

- transport failure before a status line -> ``UpstreamUnavailable``
- status 404 -> ``ResourceNotFound`` (body is not read as JSON)
- any other non-2xx status -> ``UpstreamError`` carrying the status code
- 2xx with an undecodable body -> ``UpstreamError``
- 2xx with a JSON body -> the decoded payload, unchanged
"""

import time
from collections.abc import Mapping, Sequence
from http import HTTPStatus

import httpx
import orjson
from loguru import logger

from src.core.config import DEFAULT_UPSTREAM_BASE_URL
from src.core.exceptions import ResourceNotFound, UpstreamError, UpstreamUnavailable
from src.core.types import JsonValue, QueryParams
from src.infrastructure.upstream.resources import Resource


class RickMortyClient:
    """Thin async wrapper around the upstream REST API.

    Args:
        http_client: Shared httpx client; its lifecycle is owned by the caller.
        base_url: Upstream base URL without a trailing slash.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str = DEFAULT_UPSTREAM_BASE_URL,
    ) -> None:
        self._http_client = http_client
        self.base_url = base_url.rstrip("/")

    async def list_resources(
        self,
        resource: Resource,
        page: int | None = None,
        filters: Mapping[str, str] | None = None,
    ) -> JsonValue:
        """Fetch one page of a resource collection.

        ``page`` is only forwarded when greater than 1 so the upstream keeps
        its own default-page semantics. Filters with empty values are dropped.

        Args:
            resource: Resource type to list.
            page: 1-based page number.
            filters: Filter key/value pairs, forwarded verbatim.

        Returns:
            JsonValue: The upstream ``{info, results}`` envelope.
        """
        params: QueryParams = {}
        if page is not None and page > 1:
            params["page"] = page
        if filters:
            params.update({key: value for key, value in filters.items() if value})

        return await self._get(resource, f"/{resource}", params)

    async def get_resource(self, resource: Resource, resource_id: int) -> JsonValue:
        """Fetch a single resource by id.

        Args:
            resource: Resource type.
            resource_id: Upstream id.

        Returns:
            JsonValue: The upstream object.
        """
        return await self._get(resource, f"/{resource}/{resource_id}")

    async def get_multiple_resources(
        self, resource: Resource, ids: Sequence[int]
    ) -> JsonValue:
        """Fetch several resources in one request.

        Ids are sent in the given order, duplicates included.

        Args:
            resource: Resource type.
            ids: Upstream ids.

        Returns:
            JsonValue: The upstream array (or object when a single id is sent).
        """
        joined = ",".join(str(resource_id) for resource_id in ids)
        return await self._get(resource, f"/{resource}/{joined}")

    async def _get(
        self,
        resource: Resource,
        path: str,
        params: QueryParams | None = None,
    ) -> JsonValue:
        request = self._http_client.build_request(
            "GET", f"{self.base_url}{path}", params=params or None
        )
        url = str(request.url)
        start_time = time.perf_counter()

        try:
            response = await self._http_client.send(request)
        except httpx.RequestError as exc:
            logger.warning(
                "Upstream request failed before a response was received",
                resource=resource.value,
                upstream_url=url,
                error_type=type(exc).__name__,
            )
            raise UpstreamUnavailable(url, cause=exc) from exc

        logger.debug(
            "Upstream call completed",
            resource=resource.value,
            upstream_url=url,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )

        return self._decode(response, url)

    @staticmethod
    def _decode(response: httpx.Response, url: str) -> JsonValue:
        status_code = response.status_code

        if status_code == HTTPStatus.NOT_FOUND:
            raise ResourceNotFound("Resource not found", context={"url": url})

        if not response.is_success:
            logger.warning(
                "Upstream returned an error status",
                upstream_url=url,
                status_code=status_code,
            )
            raise UpstreamError(
                f"upstream API returned status code {status_code}",
                status_code=status_code,
                context={"url": url},
            )

        try:
            payload: JsonValue = orjson.loads(response.content)
        except orjson.JSONDecodeError as exc:
            logger.warning("Upstream returned malformed JSON", upstream_url=url)
            raise UpstreamError(
                "upstream API returned a malformed JSON payload",
                status_code=status_code,
                context={"url": url},
                cause=exc,
            ) from exc

        return payload
