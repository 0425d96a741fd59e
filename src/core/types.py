"""Type aliases for dynamic data structures throughout the application.

All types defined here are JSON-serializable so they can flow into logs,
API responses and upstream payloads unchanged.
"""

from typing import Any

# Any valid JSON value. Upstream payloads are passed through as this type
# without schema validation.
type JsonValue = (
    dict[str, "JsonValue"] | list["JsonValue"] | str | int | float | bool | None
)

# Context dictionary for logging additional information
type LogContext = dict[str, Any]

# Context dictionary for error details and debugging information
type ErrorContext = dict[str, Any]

# Query parameters forwarded to the upstream API
type QueryParams = dict[str, str | int]
