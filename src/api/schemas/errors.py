"""Error response schema shared by every failure the API returns.

All errors use the same small envelope:

    {"error": "Not Found", "message": "Resource not found"}

``details`` is present only when the failure carries structured details,
such as field-level validation errors.
"""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standardized error body."""

    error: str = Field(
        ...,
        description="Error category derived from the HTTP status",
        examples=["Not Found", "External API Error", "Bad Request"],
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Resource not found", "User already exists"],
    )

    details: dict[str, Any] | None = Field(
        default=None,
        description="Structured details, e.g. field-specific validation errors",
        examples=[{"validation_errors": {"email": ["Field required"]}}],
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"error": "Not Found", "message": "Resource not found"},
                {
                    "error": "External API Error",
                    "message": "upstream API returned status code 500",
                },
                {
                    "error": "Bad Request",
                    "message": "Request validation failed",
                    "details": {"validation_errors": {"email": ["Field required"]}},
                },
            ]
        }
    }
