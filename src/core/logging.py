"""Structured logging built on Loguru.

All application code logs through ``loguru.logger``. Standard library loggers
(uvicorn, httpx, SQLAlchemy) are redirected into Loguru by
``InterceptHandler`` so every line shares the same format and context.

Formatter types:
- **console**: Human-readable with inline context (development)
- **json**: Generic structured format (self-hosted)
- **gcp**: Google Cloud Logging format with trace integration
- **aws**: CloudWatch Logs Insights friendly format

Request-scoped context (``correlation_id``, ``request_id``, ``method``,
``path``) is attached by the middleware with ``logger.contextualize`` and
shows up in every formatter.
"""

from __future__ import annotations

import inspect
import logging
import os
import sys
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Final, cast

import orjson
from loguru import logger

from src.core.config import get_settings

if TYPE_CHECKING:
    from src.core.config import Settings

type LogRecord = dict[str, Any]
type FormatterFunc = Callable[[LogRecord], str]


class _LoggingState:
    """Tracks whether logging has been configured for this process."""

    def __init__(self) -> None:
        self.configured = False


_state = _LoggingState()

DEFAULT_LOG_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)
CORRELATION_ID_DISPLAY_LENGTH: Final[int] = 8
MAX_FIELD_VALUE_LENGTH: Final[int] = 100

# Shown first and highlighted in console output
PRIORITY_FIELDS: Final[tuple[str, ...]] = (
    "correlation_id",
    "request_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
    "resource",
    "upstream_url",
)

# Silenced stdlib loggers; httpx logs every request at INFO and the upstream
# client already logs its own calls
NOISY_LOGGERS: Final[tuple[str, ...]] = ("httpx", "httpcore", "urllib3.connectionpool")


def _escape(value: object) -> str:
    """Escape braces so Loguru does not treat values as format fields."""
    return str(value).replace("{", "{{").replace("}", "}}")


def _format_priority_field(field: str, value: object) -> str:
    if field == "correlation_id" and len(str(value)) > CORRELATION_ID_DISPLAY_LENGTH:
        value = str(value)[:CORRELATION_ID_DISPLAY_LENGTH]
    elif field == "duration_ms":
        value = f"{value}ms"

    text = _escape(value)
    if field == "status_code":
        status = str(value)
        if status.startswith("2"):
            return f"<green>{text}</green>"
        if status.startswith(("4", "5")):
            return f"<red>{text}</red>"
    return text


def _format_extra_field(key: str, value: object) -> str:
    str_value = str(value)
    if key in get_settings().log_config.sensitive_fields:
        str_value = "[REDACTED]"
    elif len(str_value) > MAX_FIELD_VALUE_LENGTH:
        str_value = str_value[: MAX_FIELD_VALUE_LENGTH - 3] + "..."
    return f"{_escape(key)}={_escape(str_value)}"


def format_console_with_context(record: LogRecord) -> str:
    """Format a log record for the console with every context field inline.

    Args:
        record: Loguru record to format.

    Returns:
        str: A Loguru format string for this record.
    """
    try:
        parts = [
            f"<green>{record['time'].strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]}</green>",
            f"<level>{record['level'].name: <8}</level>",
            f"<cyan>{record['name']}:{record['function']}:{record['line']}</cyan>",
        ]

        extra: dict[str, Any] = record.get("extra", {})
        context_parts = [
            f"[<yellow>{_format_priority_field(field, extra[field])}</yellow>]"
            for field in PRIORITY_FIELDS
            if extra.get(field) is not None
        ]
        context_parts.extend(
            f"[<dim>{_format_extra_field(key, value)}</dim>]"
            for key, value in extra.items()
            if key not in PRIORITY_FIELDS
            and not key.startswith("_")
            and value is not None
        )
        if context_parts:
            parts.append(" ".join(context_parts))

        parts.append(_escape(record.get("message", "")))

        line = " | ".join(parts)
        if record.get("exception"):
            line += "\n{exception}"
        return line + "\n"
    except (AttributeError, TypeError, ValueError, KeyError):
        return DEFAULT_LOG_FORMAT + "\n"


class InterceptHandler(logging.Handler):
    """Redirect standard library logging records to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        """Forward a log record to Loguru.

        Args:
            record: Standard library LogRecord to forward.
        """
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller that originated the logged message
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        extra: dict[str, Any] = {}
        if record.name == "uvicorn.access" and hasattr(record, "scope"):
            scope = record.scope
            extra["method"] = scope.get("method", "")
            extra["path"] = scope.get("path", "")
            headers = dict(scope.get("headers", []))
            if correlation_id := headers.get(b"x-correlation-id", b"").decode():
                extra["correlation_id"] = correlation_id

        logger.opt(depth=depth, exception=record.exc_info).bind(**extra).log(
            level, record.getMessage()
        )


def _base_entry(record: LogRecord) -> dict[str, Any]:
    return {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }


def _public_extra(record: LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.get("extra", {}).items() if not k.startswith("_")}


def _dumps(entry: dict[str, Any]) -> str:
    return orjson.dumps(entry, default=str).decode() + "\n"


def serialize_for_json(record: LogRecord) -> str:
    """Format a log record as generic JSON.

    Args:
        record: Loguru record to format.

    Returns:
        str: JSON-formatted log entry with newline.
    """
    entry = _base_entry(record)
    entry.update(_public_extra(record))

    if exc := record.get("exception"):
        entry["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }

    return _dumps(entry)


def serialize_for_gcp(record: LogRecord) -> str:
    """Format a log record for GCP Cloud Logging structured ingestion.

    Args:
        record: Loguru record to format.

    Returns:
        str: JSON-formatted log entry for GCP with newline.
    """
    severity = {"TRACE": "DEBUG", "SUCCESS": "INFO"}.get(
        record["level"].name, record["level"].name
    )
    settings = get_settings()
    entry: dict[str, Any] = {
        "severity": severity,
        "message": record["message"],
        "timestamp": record["time"].isoformat(),
        "serviceContext": {
            "service": settings.app_name,
            "version": settings.app_version,
        },
    }

    labels = {"function": record["function"], "line": str(record["line"])}
    extra = _public_extra(record)
    if correlation_id := extra.pop("correlation_id", None):
        entry["logging.googleapis.com/trace"] = correlation_id
    if request_id := extra.pop("request_id", None):
        labels["request_id"] = request_id
    if extra:
        entry["jsonPayload"] = extra
    entry["logging.googleapis.com/labels"] = labels

    if record.get("exception") or record["level"].name in {"ERROR", "CRITICAL"}:
        entry["logging.googleapis.com/sourceLocation"] = {
            "file": record["file"].path,
            "line": str(record["line"]),
            "function": record["function"],
        }

    return _dumps(entry)


def serialize_for_aws(record: LogRecord) -> str:
    """Format a log record for AWS CloudWatch Logs Insights.

    Args:
        record: Loguru record to format.

    Returns:
        str: JSON-formatted log entry for AWS with newline.
    """
    entry = _base_entry(record)
    extra = _public_extra(record)
    if correlation_id := extra.pop("correlation_id", None):
        entry["traceId"] = correlation_id
    if request_id := extra.pop("request_id", None):
        entry["requestId"] = request_id
    for key, value in extra.items():
        entry.setdefault(key, value)

    if exc := record.get("exception"):
        entry["error"] = {
            "type": exc.type.__name__ if exc.type else None,
            "message": str(exc.value) if exc.value else None,
        }

    return _dumps(entry)


LOG_FORMATTERS: dict[str, FormatterFunc | None] = {
    "console": None,
    "json": serialize_for_json,
    "gcp": serialize_for_gcp,
    "aws": serialize_for_aws,
}


def detect_environment() -> str:
    """Auto-detect the formatter from cloud environment variables.

    Returns:
        str: Detected formatter type (console, gcp, aws, json).
    """
    if os.getenv("K_SERVICE"):
        return "gcp"
    if os.getenv("AWS_EXECUTION_ENV"):
        return "aws"
    if os.getenv("WEBSITE_INSTANCE_ID"):  # Azure
        return "json"
    return "console"


def setup_logging(settings: Settings) -> None:
    """Configure Loguru sinks and intercept standard library logging.

    Safe to call more than once; only the first call has an effect.

    Args:
        settings: Application settings containing log configuration.
    """
    if _state.configured:
        return

    logger.remove()

    formatter_type = settings.log_config.log_formatter_type or detect_environment()
    formatter = LOG_FORMATTERS.get(formatter_type)

    if formatter is None:
        logger.add(
            sys.stdout,
            format=cast("Any", format_console_with_context),
            level=settings.log_config.log_level,
            enqueue=True,
            colorize=True,
            diagnose=settings.debug,
            backtrace=settings.debug,
        )
    else:

        def structured_sink(message: object) -> None:
            sys.stdout.write(formatter(cast("Any", message).record))
            sys.stdout.flush()

        logger.add(
            structured_sink,
            level=settings.log_config.log_level,
            enqueue=True,
            diagnose=False,
            backtrace=False,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.handlers = [InterceptHandler()]
        uvicorn_logger.propagate = False

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logger.info(
        "Logging configured with {} formatter",
        formatter_type,
        log_level=settings.log_config.log_level,
    )

    _state.configured = True
