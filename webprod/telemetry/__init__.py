"""Logging and tracing for WebProd Issue Agent.

Usage:
    from webprod.telemetry import init_telemetry, operation_span

    init_telemetry()

    with operation_span("submit", project_id="12345"):
        ...

Environment Variables:
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR) - default: INFO
    OTEL_TRACES_EXPORTER: Exporter type (otlp, console, none) - default: none
    OTEL_EXPORTER_OTLP_ENDPOINT: OTLP collector endpoint - default: http://localhost:4317
    OTEL_SERVICE_NAME: Service name for traces - default: webprod-issue-agent
    OTEL_SDK_DISABLED: Disable trace export - default: false
"""

from .config import (
    ExporterType,
    TelemetryConfig,
    init_telemetry,
    is_telemetry_enabled,
    shutdown_telemetry,
)
from .spans import get_tracer, operation_span, record_error

__all__ = [
    # Configuration
    "ExporterType",
    "TelemetryConfig",
    "init_telemetry",
    "shutdown_telemetry",
    "is_telemetry_enabled",
    # Spans
    "get_tracer",
    "operation_span",
    "record_error",
]
