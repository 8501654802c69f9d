"""Tests for base handler functionality."""

from __future__ import annotations

import json
import logging
from unittest.mock import patch

import pytest

from cloudsecret_operator.handlers.base import BaseHandler

BODY = {
    "apiVersion": "secrets.masonwr.dev/v1",
    "kind": "CloudSecret",
    "metadata": {"name": "db-creds", "namespace": "apps", "uid": "u1"},
}


class TestBaseHandler:
    """Test cases for BaseHandler class."""

    def test_init(self):
        """Test handler initialization."""
        handler = BaseHandler(kind="TestKind")
        assert handler.kind == "TestKind"
        assert handler.logger is not None

    def test_resource_context_defaults(self):
        """Test missing metadata falls back to placeholders."""
        handler = BaseHandler(kind="TestKind")
        assert handler._get_resource_context({}) == {
            "name": "unknown",
            "namespace": "default",
            "uid": "unknown",
        }

    def test_log_info_is_structured(self, caplog):
        """Test log lines are JSON with resource context."""
        handler = BaseHandler(kind="CloudSecret")

        with caplog.at_level(logging.INFO):
            handler.log_info(BODY["metadata"], "Updating child secret", reason="UpdatingChildSecret", keys=["a"])

        record = json.loads(caplog.records[-1].getMessage())
        assert record["resource"] == "CloudSecret"
        assert record["name"] == "db-creds"
        assert record["namespace"] == "apps"
        assert record["reason"] == "UpdatingChildSecret"
        assert record["keys"] == ["a"]

    def test_log_error_sanitizes(self, caplog):
        """Test errors are logged at ERROR level with sanitized details."""
        handler = BaseHandler(kind="CloudSecret")
        error = RuntimeError("denied for projects/acme-prod/secrets/db")

        with caplog.at_level(logging.ERROR):
            handler.log_error(BODY["metadata"], "Unable to access secret", error=error)

        last = caplog.records[-1]
        assert last.levelno == logging.ERROR
        record = json.loads(last.getMessage())
        assert record["error_type"] == "RuntimeError"
        assert "acme-prod" not in record["error"]


class TestReconcileWithMetrics:
    """Test cases for reconcile_with_metrics."""

    @patch("cloudsecret_operator.handlers.base.metrics")
    def test_success(self, mock_metrics):
        """Test the reconcile function's result is returned and success counted."""
        handler = BaseHandler(kind="CloudSecret")

        assert handler.reconcile_with_metrics(BODY, lambda: 42) == 42

        mock_metrics.reconcile_total.labels.assert_any_call(kind="CloudSecret", result="success")
        mock_metrics.reconcile_duration_seconds.labels.assert_called_with(kind="CloudSecret")

    @patch("cloudsecret_operator.handlers.base.emit_reconcile_failed")
    @patch("cloudsecret_operator.handlers.base.metrics")
    def test_failure(self, mock_metrics, mock_emit):
        """Test failures are counted, reported as events and re-raised."""
        handler = BaseHandler(kind="CloudSecret")

        def fail():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            handler.reconcile_with_metrics(BODY, fail)

        mock_metrics.error_total.labels.assert_called_with(kind="CloudSecret", error_type="ValueError")
        mock_metrics.reconcile_total.labels.assert_any_call(kind="CloudSecret", result="error")
        mock_emit.assert_called_once()
        assert mock_emit.call_args[0][0] is BODY
