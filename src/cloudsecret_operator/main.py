"""Main entry point for the CloudSecret Operator.

Run with ``kopf run -m cloudsecret_operator.main``.
"""

from __future__ import annotations

import os
from typing import Any

import kopf

from . import health
from . import logging as structured_logging
from .handlers import cloud_secret  # noqa: F401  (registers the CloudSecret daemon)
from .tracing import initialize_tracing


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    structured_logging.setup_structured_logging()
    initialize_tracing()

    # Annotations keep kopf's bookkeeping out of the CloudSecret status
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = 0
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = int(os.getenv("MAX_WORKERS", "4"))

    cloud_secret.init_reconciler()

    # Metrics and health check endpoints
    metrics_port = int(os.getenv("METRICS_PORT", "8080"))
    health.start_metrics_server(metrics_port)
