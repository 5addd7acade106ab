"""
Scripture Study - Distributed Tracing with OpenTelemetry

Every upstream fetch and every aggregation runs inside a span so a slow or
failing provider shows up directly in a trace view.

Features:
- OTLP export to Jaeger, Tempo, or any OTLP-compatible backend
- Optional console export for local debugging
- Configurable sampling strategies
- Resource attributes for service identification

Usage:
    from observability.tracing import setup_tracing, create_span

    # Setup at startup
    setup_tracing(TracingConfig(service_name="scripture-study"))

    with create_span("study.aggregate", attributes={"study.reference": ref}):
        ...
"""
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME, SERVICE_VERSION
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)
from opentelemetry.sdk.trace.sampling import (
    ParentBased,
    TraceIdRatioBased,
    ALWAYS_ON,
    ALWAYS_OFF,
)
from opentelemetry.trace import Span, SpanKind, Status, StatusCode

# Global state
_tracer_provider: Optional[TracerProvider] = None
_initialized: bool = False

_log = logging.getLogger(__name__)


@dataclass
class TracingConfig:
    """Configuration for OpenTelemetry tracing."""

    service_name: str = "scripture-study"
    service_version: str = "1.0.0"
    otlp_endpoint: str = field(
        default_factory=lambda: os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")
    )
    enabled: bool = field(
        default_factory=lambda: os.getenv("OTEL_TRACING_ENABLED", "false").lower() == "true"
    )
    sample_rate: float = field(
        default_factory=lambda: float(os.getenv("OTEL_SAMPLE_RATE", "1.0"))
    )
    environment: str = field(
        default_factory=lambda: os.getenv("ENVIRONMENT", "development")
    )
    console_export: bool = field(
        default_factory=lambda: os.getenv("OTEL_CONSOLE_EXPORT", "false").lower() == "true"
    )
    batch_export: bool = True
    max_queue_size: int = 2048
    schedule_delay_millis: int = 5000
    max_export_batch_size: int = 512
    export_timeout_millis: int = 30000

    # Additional resource attributes
    extra_attributes: Dict[str, str] = field(default_factory=dict)


def setup_tracing(config: Optional[TracingConfig] = None) -> trace.TracerProvider:
    """
    Configure OpenTelemetry tracing with OTLP export.

    When tracing is disabled the global provider is left untouched, so
    spans created through the API are no-ops.

    Args:
        config: Tracing configuration. Uses defaults if not provided.

    Returns:
        The active tracer provider
    """
    global _tracer_provider, _initialized

    if _initialized and _tracer_provider:
        return _tracer_provider

    config = config or TracingConfig()

    if not config.enabled:
        _initialized = True
        return trace.get_tracer_provider()

    resource = Resource.create({
        SERVICE_NAME: config.service_name,
        SERVICE_VERSION: config.service_version,
        "deployment.environment": config.environment,
        "service.namespace": "scripture-study",
        **config.extra_attributes,
    })

    if config.sample_rate <= 0.0:
        sampler = ALWAYS_OFF
    elif config.sample_rate >= 1.0:
        sampler = ALWAYS_ON
    else:
        sampler = ParentBased(root=TraceIdRatioBased(config.sample_rate))

    _tracer_provider = TracerProvider(resource=resource, sampler=sampler)

    otlp_exporter = OTLPSpanExporter(endpoint=config.otlp_endpoint, insecure=True)
    if config.batch_export:
        processor = BatchSpanProcessor(
            otlp_exporter,
            max_queue_size=config.max_queue_size,
            schedule_delay_millis=config.schedule_delay_millis,
            max_export_batch_size=config.max_export_batch_size,
            export_timeout_millis=config.export_timeout_millis,
        )
    else:
        processor = SimpleSpanProcessor(otlp_exporter)
    _tracer_provider.add_span_processor(processor)

    if config.console_export:
        _tracer_provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(_tracer_provider)
    _initialized = True
    _log.info("Tracing enabled, exporting to %s", config.otlp_endpoint)

    return _tracer_provider


def get_tracer_provider() -> trace.TracerProvider:
    """Get the global tracer provider, initializing if necessary."""
    if not _initialized:
        setup_tracing()
    return _tracer_provider or trace.get_tracer_provider()


def get_tracer(name: str, version: str = "1.0.0") -> trace.Tracer:
    """
    Get a tracer instance for manual instrumentation.

    Example:
        >>> tracer = get_tracer(__name__)
        >>> with tracer.start_as_current_span("verses.primary") as span:
        ...     span.set_attribute("study.translation", "kjv")
    """
    return get_tracer_provider().get_tracer(name, version)


def shutdown_tracing() -> None:
    """
    Gracefully shutdown tracing, flushing any pending spans.

    Call this during application shutdown.
    """
    global _tracer_provider, _initialized
    if _tracer_provider is not None:
        _tracer_provider.shutdown()
    _initialized = False
    _tracer_provider = None


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Optional[Dict[str, Any]] = None,
    tracer_name: str = "study.observability",
) -> Iterator[Span]:
    """
    Context manager for creating spans with automatic error handling.

    Example:
        >>> with create_span("study.aggregate", attributes={"study.reference": "John 3:16"}) as span:
        ...     material = await orchestrator.study("John 3:16")
    """
    tracer = get_tracer(tracer_name)
    with tracer.start_as_current_span(name, kind=kind) as span:
        if attributes:
            for key, value in attributes.items():
                span.set_attribute(key, value)
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise
