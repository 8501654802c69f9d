"""Tests for tracing helpers."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from cloudsecret_operator import tracing


@pytest.fixture(autouse=True)
def reset_tracer():
    yield
    tracing._tracer = None


class TestTraceSpan:
    """Test cases for trace_span."""

    def test_noop_without_tracer(self):
        """Test spans are skipped when tracing is not initialized."""
        with tracing.trace_span("reconcile_cloudsecret", kind="CloudSecret") as span:
            assert span is None

    def test_records_exception(self):
        """Test exceptions are recorded on the span and re-raised."""
        tracer = MagicMock()
        span = tracer.start_as_current_span.return_value.__enter__.return_value
        span.is_recording.return_value = True
        tracing._tracer = tracer

        with pytest.raises(RuntimeError):
            with tracing.trace_span("resolve_secret", attributes={"secret.key": "a"}):
                raise RuntimeError("boom")

        span.record_exception.assert_called_once()
        assert tracer.start_as_current_span.call_args[1]["attributes"] == {"secret.key": "a"}


class TestInitializeTracing:
    """Test cases for initialize_tracing."""

    def test_disabled(self, monkeypatch):
        """Test OTEL_TRACES_ENABLED=false leaves tracing off."""
        monkeypatch.setenv("OTEL_TRACES_ENABLED", "false")

        tracing.initialize_tracing()

        assert tracing.get_tracer() is None

    @patch("cloudsecret_operator.tracing.BatchSpanProcessor")
    @patch("cloudsecret_operator.tracing.OTLPSpanExporter")
    @patch("cloudsecret_operator.tracing.trace")
    def test_enabled(self, mock_trace, mock_exporter, mock_processor, monkeypatch):
        """Test the tracer is installed with the configured endpoint."""
        monkeypatch.delenv("OTEL_TRACES_ENABLED", raising=False)
        monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://collector:4317")

        tracing.initialize_tracing()

        mock_exporter.assert_called_once_with(endpoint="http://collector:4317")
        assert tracing.get_tracer() is mock_trace.get_tracer.return_value
