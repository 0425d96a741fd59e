"""The proxied resource types and the filters each one accepts upstream."""

from enum import StrEnum


class Resource(StrEnum):
    """Resource types exposed by the upstream API.

    The value is the upstream path segment (``/character``, ``/location``,
    ``/episode``).
    """

    CHARACTER = "character"
    LOCATION = "location"
    EPISODE = "episode"

    @property
    def filter_keys(self) -> tuple[str, ...]:
        """Query keys the upstream accepts to narrow a list request."""
        return RESOURCE_FILTERS[self]


RESOURCE_FILTERS: dict[Resource, tuple[str, ...]] = {
    Resource.CHARACTER: ("name", "status", "species", "type", "gender"),
    Resource.LOCATION: ("name", "type", "dimension"),
    Resource.EPISODE: ("name", "episode"),
}
