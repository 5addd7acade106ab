"""
Scripture Study - Observability Package

Tracing and structured logging for the study engine.

Components:
- tracing: OpenTelemetry distributed tracing with OTLP export
- logging: Structlog integration with trace context propagation

Usage:
    from observability import setup_observability, get_logger

    # Initialize at application startup
    setup_observability(get_config().observability)

    logger = get_logger(__name__)
"""
from typing import Any, Optional

from .tracing import (
    setup_tracing,
    get_tracer,
    get_tracer_provider,
    create_span,
    TracingConfig,
    shutdown_tracing,
)
from .logging import (
    setup_logging,
    get_logger,
    LoggingConfig,
    LogContext,
    SourceLogger,
    bind_context,
    clear_context,
    shutdown_logging,
)

__all__ = [
    # Tracing
    "setup_tracing",
    "get_tracer",
    "get_tracer_provider",
    "create_span",
    "TracingConfig",
    "shutdown_tracing",
    # Logging
    "setup_logging",
    "get_logger",
    "LoggingConfig",
    "LogContext",
    "SourceLogger",
    "bind_context",
    "clear_context",
    "shutdown_logging",
    # Combined setup
    "setup_observability",
    "shutdown_observability",
]

__version__ = "1.0.0"


def setup_observability(settings: Optional[Any] = None) -> None:
    """
    Initialize logging and tracing from an ``ObservabilityConfig``.

    Args:
        settings: ``config.ObservabilityConfig``; read from the
            environment when omitted.
    """
    if settings is None:
        from config import get_config

        settings = get_config().observability

    setup_logging(LoggingConfig(
        service_name=settings.service_name,
        level=settings.log_level.upper(),
        json_format=settings.log_json_format,
        environment=settings.environment,
    ))

    setup_tracing(TracingConfig(
        service_name=settings.service_name,
        service_version=settings.service_version,
        otlp_endpoint=settings.otlp_endpoint,
        enabled=settings.tracing_enabled,
        sample_rate=settings.get_sample_rate_for_env(),
        environment=settings.environment,
    ))


def shutdown_observability() -> None:
    """
    Gracefully shutdown all observability components.

    Call this during application shutdown to ensure all telemetry
    data is flushed to the collector.
    """
    shutdown_tracing()
    shutdown_logging()
