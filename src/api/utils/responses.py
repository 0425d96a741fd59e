"""JSON response classes using orjson serialization.

``ORJSONResponse`` is the application's default response class and sorts
keys for predictable output. ``PassthroughJSONResponse`` keeps key order
untouched; the resource proxy uses it so upstream payloads reach the client
exactly as the upstream produced them.
"""

from typing import Any

import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ORJSONResponse(JSONResponse):
    """FastAPI Response class using orjson, with sorted keys.

    Attributes:
        media_type: The media type for the response.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - accepts any JSON-serializable content
        """Render the content as JSON using orjson.

        Args:
            content: The content to serialize to JSON.

        Returns:
            bytes: The JSON-encoded bytes.
        """
        if isinstance(content, BaseModel):
            content = content.model_dump()

        return orjson.dumps(content, option=orjson.OPT_SORT_KEYS)


class PassthroughJSONResponse(JSONResponse):
    """orjson response that preserves the key order of ``content``."""

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - upstream JSON payload
        return orjson.dumps(content)
