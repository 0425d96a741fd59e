"""Request context management utilities for correlation IDs and request tracking."""

import uuid
from contextvars import ContextVar

# Context variable for storing correlation ID across async boundaries
_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


class RequestContext:
    """Async-safe storage for request-scoped data.

    The correlation ID set by the request context middleware is read back by
    the exception handlers, the upstream client logs and the tracing hooks.
    """

    @staticmethod
    def set_correlation_id(correlation_id: str) -> None:
        """Set the correlation ID for the current context.

        Args:
            correlation_id: The correlation ID to store in the context.
        """
        _correlation_id_var.set(correlation_id)

    @staticmethod
    def get_correlation_id() -> str | None:
        """Get the correlation ID from the current context.

        Returns:
            str | None: The correlation ID if set, None otherwise.
        """
        return _correlation_id_var.get()

    @staticmethod
    def clear() -> None:
        """Clear all context variables."""
        _correlation_id_var.set(None)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for request tracking.

    Returns:
        str: A string representation of a UUID4.
    """
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """Generate a unique request ID for individual request tracking.

    Returns:
        str: A prefixed UUID4 string in format 'req-<uuid4>'.
    """
    return f"req-{uuid.uuid4()}"
