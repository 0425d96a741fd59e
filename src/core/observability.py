"""Distributed tracing with OpenTelemetry and pluggable exporters.

Spans are produced for inbound requests (FastAPI), database queries
(SQLAlchemy) and outbound calls to the upstream API (HTTPX). Exporters:
- console: spans are written through Loguru (development)
- gcp: Google Cloud Trace, imported lazily
- aws / otlp: OTLP over gRPC
- none: tracing provider without exporter
"""

from __future__ import annotations

import importlib
import os
from typing import TYPE_CHECKING, Any, Final

from loguru import logger
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SpanExporter,
    SpanExportResult,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

from src.core.context import RequestContext

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fastapi import FastAPI

    from src.core.config import Settings

SERVICE_NAME_KEY: Final[str] = "service.name"
SERVICE_VERSION_KEY: Final[str] = "service.version"
ENVIRONMENT_KEY: Final[str] = "deployment.environment"

EXCLUDED_URLS: Final[str] = "/health,/docs,/redoc,/openapi.json"
NOISY_SPANS: Final[frozenset[str]] = frozenset(
    {"connect", "http send", "http receive", "cursor.execute"}
)


class LoguruSpanExporter(SpanExporter):
    """Span exporter that writes finished spans through the Loguru logger."""

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        """Log each finished span at debug level.

        Args:
            spans: Finished spans to export.

        Returns:
            SpanExportResult: Always SUCCESS.
        """
        for span in spans:
            span_context = span.get_span_context()
            if not span_context or span.name in NOISY_SPANS:
                continue

            attributes = dict(span.attributes or {})
            duration_ms = None
            if span.end_time and span.start_time:
                duration_ms = (span.end_time - span.start_time) // 1_000_000

            logger.bind(
                trace_id=f"0x{span_context.trace_id:032x}",
                span_id=f"0x{span_context.span_id:016x}",
                correlation_id=attributes.get(
                    "correlation_id", RequestContext.get_correlation_id()
                ),
                span_kind=span.kind.name,
                duration_ms=duration_ms,
                status=span.status.status_code.name,
            ).debug("Trace span completed: {}", span.name)

        return SpanExportResult.SUCCESS


def get_span_exporter(settings: Settings) -> SpanExporter | None:
    """Get the span exporter for the configured exporter type.

    Args:
        settings: Application settings.

    Returns:
        SpanExporter | None: Configured exporter or None if disabled.
    """
    exporter_type = settings.observability_config.exporter_type

    if exporter_type == "console":
        return LoguruSpanExporter()

    if exporter_type == "gcp":
        return _get_gcp_exporter(settings)

    if exporter_type in ("aws", "otlp"):
        endpoint = (
            settings.observability_config.exporter_endpoint or "http://localhost:4317"
        )
        logger.info("Using {} trace exporter at {}", exporter_type, endpoint)
        return OTLPSpanExporter(
            endpoint=endpoint,
            insecure=settings.environment == "development",
        )

    logger.info("Tracing exporter disabled")
    return None


def _get_gcp_exporter(settings: Settings) -> SpanExporter | None:
    project_id = settings.observability_config.gcp_project_id or os.getenv(
        "GOOGLE_CLOUD_PROJECT"
    )
    if not project_id:
        logger.warning("GCP project ID not configured, disabling trace export")
        return None

    try:
        module = importlib.import_module("opentelemetry.exporter.cloud_trace")
    except ImportError:
        logger.error(
            "GCP exporter requested but opentelemetry-exporter-gcp-trace "
            "is not installed"
        )
        return None

    logger.info("Using GCP Cloud Trace exporter for project {}", project_id)
    exporter: SpanExporter = module.CloudTraceSpanExporter(project_id=project_id)
    return exporter


def setup_tracing(settings: Settings) -> None:
    """Install a global tracer provider with the configured exporter.

    Args:
        settings: Application settings.
    """
    if not settings.observability_config.enable_tracing:
        logger.info("Tracing disabled by configuration")
        return

    resource = Resource.create(
        {
            SERVICE_NAME_KEY: settings.app_name,
            SERVICE_VERSION_KEY: settings.app_version,
            ENVIRONMENT_KEY: settings.environment,
        }
    )
    tracer_provider = TracerProvider(
        resource=resource,
        sampler=TraceIdRatioBased(settings.observability_config.trace_sample_rate),
    )

    if exporter := get_span_exporter(settings):
        tracer_provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(tracer_provider)

    logger.info(
        "Tracing configured",
        exporter_type=settings.observability_config.exporter_type,
        sample_rate=settings.observability_config.trace_sample_rate,
    )


def instrument_app(app: FastAPI, settings: Settings) -> None:
    """Instrument the FastAPI app, SQLAlchemy and outbound HTTPX calls.

    Args:
        app: FastAPI application to instrument.
        settings: Application settings.
    """
    if not settings.observability_config.enable_tracing:
        return

    FastAPIInstrumentor.instrument_app(
        app,
        excluded_urls=EXCLUDED_URLS,
        server_request_hook=add_correlation_id_to_span,
    )
    SQLAlchemyInstrumentor().instrument(enable_commenter=True)
    HTTPXClientInstrumentor().instrument()

    logger.info("Application instrumented for tracing")


def add_correlation_id_to_span(span: trace.Span, scope: dict[str, Any]) -> None:
    """Copy the correlation ID and request ID onto the server span.

    Args:
        span: The current span.
        scope: ASGI scope dict containing request information.
    """
    if span is None or not span.is_recording():
        return

    headers = dict(scope.get("headers", []))
    correlation_id = RequestContext.get_correlation_id() or headers.get(
        b"x-correlation-id", b""
    ).decode()
    if correlation_id:
        span.set_attribute("correlation_id", correlation_id)

    if request_id := headers.get(b"x-request-id", b"").decode():
        span.set_attribute("request_id", request_id)
