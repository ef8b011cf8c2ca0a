"""OpenTelemetry wiring for calculation spans."""

from __future__ import annotations

import os

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
    SpanExporter,
)

from .config import TracingSettings
from .types import SpanAttributes

logger = structlog.get_logger(__name__)

SUPPORTED_EXPORTERS = ("otlp", "console")


def build_tracer_provider(
    settings: TracingSettings,
    exporter: SpanExporter | None = None,
) -> TracerProvider | None:
    """Create a tracer provider for the configured exporter.

    ``OTEL_TRACES_EXPORTER`` selects ``otlp`` (batched) or ``console``
    (synchronous); ``none`` disables export. An explicit ``exporter`` wins
    over the environment and is flushed synchronously.

    Returns:
        The provider, or None when tracing is disabled.
    """
    if not settings.enabled:
        logger.info("tracing_disabled")
        return None

    provider = TracerProvider(resource=Resource.create({"service.name": settings.service_name}))
    if exporter is not None:
        provider.add_span_processor(SimpleSpanProcessor(exporter))
        return provider

    exporter_name = os.getenv("OTEL_TRACES_EXPORTER", "otlp").lower()
    if exporter_name in {"none", ""}:
        logger.info("tracing_exporter_disabled")
        return None
    if exporter_name not in SUPPORTED_EXPORTERS:
        raise ValueError(
            f"Unsupported trace exporter '{exporter_name}'. "
            f"Must be one of: {', '.join(SUPPORTED_EXPORTERS)}"
        )

    if exporter_name == "console":
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    else:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter()))
    logger.info(
        "tracing_configured",
        exporter=exporter_name,
        service_name=settings.service_name,
    )
    return provider


def setup_tracing(settings: TracingSettings, exporter: SpanExporter | None = None) -> bool:
    """Install the global tracer provider.

    Returns:
        True if tracing was configured, False otherwise.
    """
    provider = build_tracer_provider(settings, exporter)
    if provider is None:
        return False
    trace.set_tracer_provider(provider)
    return True


def annotate_span(attributes: SpanAttributes) -> None:
    """Attach calculation attributes to the active span, if any."""
    span = trace.get_current_span()
    if not span.is_recording():
        return
    for key, value in attributes.items():
        span.set_attribute(key, value)
