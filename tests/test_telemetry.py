"""Tests for logging setup and operation spans."""

import logging
from unittest.mock import MagicMock, patch

import pytest

from webprod.telemetry import (
    ExporterType,
    TelemetryConfig,
    init_telemetry,
    is_telemetry_enabled,
    operation_span,
    shutdown_telemetry,
)
from webprod.telemetry.config import _setup_logging


class TestTelemetryConfig:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("OTEL_TRACES_EXPORTER", raising=False)
        monkeypatch.delenv("OTEL_SDK_DISABLED", raising=False)
        config = TelemetryConfig.from_env()
        assert config.traces_exporter is ExporterType.NONE
        assert config.service_name == "webprod-issue-agent"

    def test_unknown_exporter(self, monkeypatch):
        monkeypatch.setenv("OTEL_TRACES_EXPORTER", "zipkin")
        assert TelemetryConfig.from_env().traces_exporter is ExporterType.NONE

    def test_disabled_overrides_exporter(self, monkeypatch):
        monkeypatch.setenv("OTEL_TRACES_EXPORTER", "otlp")
        monkeypatch.setenv("OTEL_SDK_DISABLED", "true")
        assert TelemetryConfig.from_env().traces_exporter is ExporterType.NONE


class TestSetupLogging:
    def test_configures_root_and_quiets_httpx(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            _setup_logging(TelemetryConfig(log_level="INFO"))
            assert root.level == logging.INFO
            assert len(root.handlers) == 1
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

class TestInitTelemetry:
    @pytest.fixture(autouse=True)
    def reset(self):
        shutdown_telemetry()
        yield
        shutdown_telemetry()

    def test_initializes_once(self):
        with patch("webprod.telemetry.config._setup_logging") as setup_logging:
            init_telemetry(TelemetryConfig(log_level="DEBUG"))
            init_telemetry(TelemetryConfig(log_level="WARNING"))

        setup_logging.assert_called_once()
        assert setup_logging.call_args.args[0].log_level == "DEBUG"

    def test_disabled_without_exporter(self):
        with patch("webprod.telemetry.config._setup_logging"):
            init_telemetry(TelemetryConfig(traces_exporter=ExporterType.NONE))
        assert not is_telemetry_enabled()

    def test_enabled_with_exporter_until_shutdown(self):
        with (
            patch("webprod.telemetry.config._setup_logging"),
            patch(
                "webprod.telemetry.config._setup_strands_telemetry",
                return_value=MagicMock(),
            ),
        ):
            init_telemetry(TelemetryConfig(traces_exporter=ExporterType.CONSOLE))
        assert is_telemetry_enabled()

        shutdown_telemetry()
        assert not is_telemetry_enabled()



class TestOperationSpan:
    def test_yields_span(self):
        with operation_span("generate", item_count=3) as span:
            span.set_attribute("summary_length", 10)

    def test_reraises(self):
        with pytest.raises(RuntimeError, match="boom"):
            with operation_span("submit"):
                raise RuntimeError("boom")
