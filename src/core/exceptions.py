"""Structured exception hierarchy for the gateway.

Every failure the gateway raises on purpose derives from ``GatewayError`` and
is translated into an HTTP response exactly once, by the global exception
handlers in ``src.api.middleware.error_handler``. Route handlers never catch
these errors themselves.

Key components:
- **ErrorCode enum**: Standardized error identifiers for programmatic handling
- **Severity enum**: Error classification for monitoring and alerting
- **GatewayError**: Base exception with context and exception chaining
- **Specialized exceptions**: Not-found, validation, conflict and upstream
  failures
"""

from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for the gateway."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred in the system."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Input validation failed due to invalid or malformed data."""

    NOT_FOUND = "NOT_FOUND"
    """The requested resource could not be found."""

    CONFLICT = "CONFLICT"
    """The request conflicts with the current state of a stored resource."""

    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    """The upstream API answered with an error or an unreadable payload."""

    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    """The upstream API could not be reached at all."""


class Severity(Enum):
    """Severity levels used to pick log levels and alerting."""

    LOW = "LOW"
    """Low severity errors that don't significantly impact functionality."""

    MEDIUM = "MEDIUM"
    """Medium severity errors that may affect some features but not critical ops."""

    HIGH = "HIGH"
    """High severity errors impacting critical functionality or data integrity."""

    CRITICAL = "CRITICAL"
    """Critical errors requiring immediate attention, may cause system failures."""


class GatewayError(Exception):
    """Base exception class for all gateway exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    @property
    def is_expected(self) -> bool:
        """Whether the error belongs to normal operation (LOW or MEDIUM severity).

        Returns:
            bool: True if the error is expected
        """
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    def __str__(self) -> str:
        """Return the human-readable message.

        Returns:
            str: The error message
        """
        return self.message

    def __repr__(self) -> str:
        """Return a detailed representation of the exception.

        Returns:
            str: Class name, error code, message, severity and context
        """
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class ResourceNotFound(GatewayError):
    """Raised when a requested resource does not exist.

    Used both for upstream 404 answers and for missing local records.
    """

    def __init__(
        self,
        message: str = "Resource not found",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(ErrorCode.NOT_FOUND, message, Severity.LOW, context, cause)


class ValidationError(GatewayError):
    """Raised when request data fails validation rules."""

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            ErrorCode.VALIDATION_ERROR, message, Severity.LOW, context, cause
        )


class ConflictError(GatewayError):
    """Raised when a write would violate a uniqueness constraint."""

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(ErrorCode.CONFLICT, message, Severity.LOW, context, cause)


class UpstreamError(GatewayError):
    """Raised when the upstream API returns an unusable answer.

    Args:
        message: Description of the failure
        status_code: Upstream HTTP status, when a response was received
        context: Additional context information about the error
        cause: The original exception that caused this error
        error_code: Error code (defaults to UPSTREAM_ERROR)
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
        error_code: str | ErrorCode = ErrorCode.UPSTREAM_ERROR,
    ) -> None:
        self.status_code = status_code
        full_context = dict(context or {})
        if status_code is not None:
            full_context.setdefault("upstream_status", status_code)
        super().__init__(error_code, message, Severity.HIGH, full_context, cause)


class UpstreamUnavailable(UpstreamError):
    """Raised when the upstream API cannot be reached (DNS, connect, timeout, TLS).

    Args:
        url: The URL that was being requested
        cause: The transport exception
    """

    def __init__(self, url: str, cause: Exception | None = None) -> None:
        self.url = url
        reason = f": {cause}" if cause is not None and str(cause) else ""
        super().__init__(
            f"error communicating with upstream API{reason}",
            context={"url": url},
            cause=cause,
            error_code=ErrorCode.UPSTREAM_UNAVAILABLE,
        )
