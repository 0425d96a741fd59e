"""Generic read-only proxy for the upstream resource collections.

Characters, locations and episodes behave identically apart from their path
and accepted filters, so one ``ResourceProxy`` serves all three. Each
``ResourceDefinition`` gets its own router with this route table:

    GET {prefix}            list, paginated and filtered
    GET {prefix}/multiple   several ids in one upstream call (?ids=1,2,3)
    GET {prefix}/{id}       one resource by numeric id

Upstream payloads are returned unchanged. Failures propagate to the global
exception handlers.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from loguru import logger

from src.api.dependencies import RickMortyClientDep
from src.api.utils.params import lenient_int, parse_id_list
from src.api.utils.responses import PassthroughJSONResponse
from src.core.exceptions import ResourceNotFound
from src.core.types import JsonValue
from src.infrastructure.upstream import Resource, RickMortyClient

DEFAULT_PAGE = 1
IDS_REQUIRED_MESSAGE = "ids parameter is required"


@dataclass(frozen=True)
class ResourceDefinition:
    """How one upstream resource is exposed by the gateway."""

    resource: Resource
    prefix: str
    tag: str

    @property
    def filter_keys(self) -> tuple[str, ...]:
        return self.resource.filter_keys


RESOURCE_DEFINITIONS: tuple[ResourceDefinition, ...] = (
    ResourceDefinition(Resource.CHARACTER, "/api/characters", "characters"),
    ResourceDefinition(Resource.LOCATION, "/api/locations", "locations"),
    ResourceDefinition(Resource.EPISODE, "/api/episodes", "episodes"),
)


class ResourceProxy:
    """Translate gateway query strings into upstream client calls.

    Args:
        client: Upstream client.
        definition: The resource this proxy serves.
    """

    def __init__(self, client: RickMortyClient, definition: ResourceDefinition) -> None:
        self.client = client
        self.definition = definition

    async def list(self, query: Mapping[str, str]) -> JsonValue:
        """Fetch one page, forwarding only the resource's non-empty filters.

        Args:
            query: The request's query parameters.

        Returns:
            JsonValue: The upstream ``{info, results}`` envelope.
        """
        page = lenient_int(query.get("page"), default=DEFAULT_PAGE)
        filters = {
            key: query[key] for key in self.definition.filter_keys if query.get(key)
        }
        return await self.client.list_resources(
            self.definition.resource, page=page, filters=filters
        )

    async def show(self, resource_id: int) -> JsonValue:
        return await self.client.get_resource(self.definition.resource, resource_id)

    async def multiple(self, ids: str | None) -> JsonValue:
        """Fetch several resources from a comma-separated id list.

        Args:
            ids: Raw ``ids`` query value.

        Returns:
            JsonValue: The upstream payload.

        Raises:
            ResourceNotFound: If ``ids`` is absent or empty. No upstream call
                is made in that case.
        """
        if not ids:
            logger.debug("Rejected multiple lookup without ids")
            raise ResourceNotFound(
                IDS_REQUIRED_MESSAGE, context={"resource": self.definition.resource.value}
            )
        return await self.client.get_multiple_resources(
            self.definition.resource, parse_id_list(ids)
        )


def build_resource_router(definition: ResourceDefinition) -> APIRouter:
    """Create the router exposing ``definition`` under its prefix.

    Args:
        definition: Resource to expose.

    Returns:
        APIRouter: Router with the list, multiple and show routes.
    """
    router = APIRouter(prefix=definition.prefix, tags=[definition.tag])
    name = definition.tag

    def get_proxy(client: RickMortyClientDep) -> ResourceProxy:
        return ResourceProxy(client, definition)

    proxy_dep = Annotated[ResourceProxy, Depends(get_proxy)]

    @router.get(
        "",
        name=f"{name}_list",
        response_class=PassthroughJSONResponse,
        description=(
            f"List {name}, paginated with ?page=N. "
            f"Filters: {', '.join(definition.filter_keys)}."
        ),
    )
    async def list_resources(
        request: Request, proxy: proxy_dep
    ) -> PassthroughJSONResponse:
        return PassthroughJSONResponse(await proxy.list(request.query_params))

    @router.get(
        "/multiple",
        name=f"{name}_multiple",
        response_class=PassthroughJSONResponse,
        description=f"Get several {name} in one call, e.g. ?ids=1,2,3.",
    )
    async def multiple_resources(
        proxy: proxy_dep,
        ids: Annotated[str | None, Query(description="Comma-separated ids")] = None,
    ) -> PassthroughJSONResponse:
        return PassthroughJSONResponse(await proxy.multiple(ids))

    @router.get(
        "/{resource_id:int}",
        name=f"{name}_show",
        response_class=PassthroughJSONResponse,
        description=f"Get one of the {name} by numeric id.",
    )
    async def show_resource(
        resource_id: int, proxy: proxy_dep
    ) -> PassthroughJSONResponse:
        return PassthroughJSONResponse(await proxy.show(resource_id))

    return router
