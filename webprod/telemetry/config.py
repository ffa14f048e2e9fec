"""Logging and OpenTelemetry setup.

Reads configuration from the environment, configures root logging with one
structured console handler, and optionally wires Strands' OpenTelemetry
exporters so agent and LLM spans are exported alongside ours.
"""

import logging
import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

_telemetry_initialized = False
_strands_telemetry = None


class ExporterType(Enum):
    """Supported trace exporters."""

    OTLP = "otlp"
    CONSOLE = "console"
    NONE = "none"


@dataclass
class TelemetryConfig:
    """Logging and tracing configuration."""

    log_level: str = "INFO"
    service_name: str = "webprod-issue-agent"
    otlp_endpoint: str = "http://localhost:4317"
    traces_exporter: ExporterType = ExporterType.NONE

    @classmethod
    def from_env(cls) -> "TelemetryConfig":
        """Create config from environment variables."""
        exporter_str = os.getenv("OTEL_TRACES_EXPORTER", "none").lower()
        try:
            exporter = ExporterType(exporter_str)
        except ValueError:
            logger.warning(f"Unknown exporter type '{exporter_str}', traces will not be exported")
            exporter = ExporterType.NONE

        if os.getenv("OTEL_SDK_DISABLED", "false").lower() in ("true", "1", "yes"):
            exporter = ExporterType.NONE

        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            service_name=os.getenv("OTEL_SERVICE_NAME", "webprod-issue-agent"),
            otlp_endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317"),
            traces_exporter=exporter,
        )


def _setup_logging(config: TelemetryConfig) -> None:
    level = getattr(logging, config.log_level, logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(console_handler)

    logging.getLogger("strands").setLevel(level)
    logging.getLogger("webprod").setLevel(level)

    # Request lines from httpx include the apiKey query parameter
    if level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("botocore").setLevel(logging.WARNING)
        logging.getLogger("boto3").setLevel(logging.WARNING)

    logger.info(f"Logging configured: level={config.log_level}")


def _setup_strands_telemetry(config: TelemetryConfig) -> Any:
    """Wire the Strands trace exporter; returns the StrandsTelemetry instance."""
    if config.traces_exporter == ExporterType.NONE:
        return None

    try:
        from strands.telemetry import StrandsTelemetry
    except ImportError:
        logger.warning(
            "strands.telemetry not available. Install with: pip install 'strands-agents[otel]'"
        )
        return None

    try:
        telemetry = StrandsTelemetry()
        if config.traces_exporter == ExporterType.OTLP:
            os.environ.setdefault("OTEL_SERVICE_NAME", config.service_name)
            telemetry.setup_otlp_exporter(endpoint=config.otlp_endpoint)
            logger.info(f"OTLP exporter configured: endpoint={config.otlp_endpoint}")
        else:
            telemetry.setup_console_exporter()
            logger.info("Console exporter configured")
        return telemetry
    except Exception as e:
        logger.warning(f"Failed to initialize OpenTelemetry: {e}")
        return None


def init_telemetry(config: TelemetryConfig | None = None) -> None:
    """Initialize logging and tracing once at startup."""
    global _telemetry_initialized, _strands_telemetry

    if _telemetry_initialized:
        logger.debug("Telemetry already initialized, skipping")
        return

    if config is None:
        config = TelemetryConfig.from_env()

    _setup_logging(config)
    _strands_telemetry = _setup_strands_telemetry(config)
    _telemetry_initialized = True
    logger.info(
        f"Telemetry initialized: service={config.service_name}, "
        f"exporter={config.traces_exporter.value}"
    )


def shutdown_telemetry() -> None:
    global _telemetry_initialized, _strands_telemetry

    _telemetry_initialized = False
    _strands_telemetry = None


def is_telemetry_enabled() -> bool:
    """Check if a trace exporter is active."""
    return _telemetry_initialized and _strands_telemetry is not None
