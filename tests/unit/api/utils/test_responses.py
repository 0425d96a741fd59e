"""Unit tests for the orjson response classes."""

from datetime import UTC, datetime

import pytest
from pydantic import BaseModel

from src.api.utils.responses import ORJSONResponse, PassthroughJSONResponse


class _Item(BaseModel):
    name: str


@pytest.mark.unit
class TestORJSONResponse:
    """Default application responses."""

    def test_keys_are_sorted(self) -> None:
        """Output is deterministic."""
        response = ORJSONResponse({"b": 1, "a": 2})

        assert response.body == b'{"a":2,"b":1}'

    def test_models_and_datetimes(self) -> None:
        """Pydantic models and datetimes serialize natively."""
        assert ORJSONResponse(_Item(name="Rick")).body == b'{"name":"Rick"}'
        body = ORJSONResponse({"at": datetime(2024, 1, 1, tzinfo=UTC)}).body
        assert body == b'{"at":"2024-01-01T00:00:00+00:00"}'


@pytest.mark.unit
class TestPassthroughJSONResponse:
    """Upstream payload responses."""

    def test_key_order_is_preserved(self) -> None:
        """Upstream ordering reaches the client untouched."""
        payload = {"info": {"pages": 42, "count": 826}, "results": []}

        response = PassthroughJSONResponse(payload)

        assert response.body == b'{"info":{"pages":42,"count":826},"results":[]}'
        assert response.media_type == "application/json"
