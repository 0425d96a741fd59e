"""Sensitive data sanitization for error logging.

Registration and user-update payloads carry plaintext passwords, and admin
requests carry Basic credentials. Anything that ends up in an error log goes
through this module first so those values are replaced with ``[REDACTED]``.

Detection combines a default regex over field names with the configurable
``log_config.sensitive_fields`` list. Only logged copies are sanitized; the
original data is never modified.
"""

from __future__ import annotations

import re
from functools import lru_cache
from re import Pattern
from typing import Any, Final

from src.core.config import get_settings

REDACTED: Final[str] = "[REDACTED]"

DEFAULT_SENSITIVE_PATTERN: Final[Pattern[str]] = re.compile(
    r"(password|passwd|pwd|secret|token|api[_-]?key|apikey|authorization|"
    r"credential|private[_-]?key|access[_-]?key|session|cookie)",
    re.IGNORECASE,
)

MAX_DEPTH: Final[int] = 10


@lru_cache(maxsize=1)
def _get_sensitive_fields() -> tuple[str, ...]:
    """Get the configured sensitive fields from settings, lowercased."""
    settings = get_settings()
    return tuple(field.lower() for field in settings.log_config.sensitive_fields)


def is_sensitive_field(field_name: str) -> bool:
    """Check if a field name indicates sensitive data.

    Args:
        field_name: The field name to check.

    Returns:
        bool: True if the field appears to contain sensitive data.
    """
    if DEFAULT_SENSITIVE_PATTERN.search(field_name):
        return True

    field_lower = field_name.lower()
    return any(sensitive in field_lower for sensitive in _get_sensitive_fields())


def sanitize_value(value: Any, field_name: str = "", depth: int = 0) -> Any:  # noqa: ANN401 - walks arbitrary JSON-like data
    """Recursively redact sensitive values inside dicts, lists and tuples.

    Args:
        value: The value to potentially sanitize.
        field_name: The key the value was stored under, if any.
        depth: Current recursion depth.

    Returns:
        Any: Sanitized copy of ``value``.
    """
    if depth > MAX_DEPTH:
        return REDACTED

    if field_name and is_sensitive_field(field_name):
        return REDACTED

    if isinstance(value, dict):
        return {k: sanitize_value(v, str(k), depth + 1) for k, v in value.items()}

    if isinstance(value, list):
        return [sanitize_value(item, "", depth + 1) for item in value]

    if isinstance(value, tuple):
        return tuple(sanitize_value(item, "", depth + 1) for item in value)

    return value


def sanitize_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Sanitize a dictionary by redacting sensitive fields.

    Args:
        data: Dictionary to sanitize.

    Returns:
        dict[str, Any]: New dictionary with sensitive values redacted.
    """
    return {key: sanitize_value(value, key) for key, value in data.items()}


def sanitize_error_context(
    error: Exception, context: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Create sanitized error context for logging.

    Args:
        error: The exception to create context for.
        context: Additional request context to include.

    Returns:
        dict[str, Any]: Sanitized error context safe for logging.
    """
    error_context: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }

    if context:
        error_context.update(sanitize_dict(context))

    # GatewayError.context and other public attributes
    error_attrs = {
        k: v
        for k, v in getattr(error, "__dict__", {}).items()
        if not k.startswith("_") and k != "cause"
    }
    if error_attrs:
        error_context["error_attributes"] = sanitize_dict(error_attrs)

    return error_context


def sanitize_sql_params(params: object) -> object:
    """Sanitize SQL query parameters for safe logging.

    Named parameters are redacted by key. Positional parameters cannot be
    classified by name and are returned unchanged.

    Args:
        params: SQL query parameters in the format SQLAlchemy passes them.

    Returns:
        object: Sanitized parameters, or ``REDACTED`` for unknown formats.
    """
    if params is None:
        return None

    if isinstance(params, dict):
        return sanitize_dict(params)
    if isinstance(params, (list, tuple)):
        return params

    return REDACTED
