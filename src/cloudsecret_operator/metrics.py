"""Prometheus metrics for the CloudSecret Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "cloudsecret_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "cloudsecret_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

requeue_after_seconds = Histogram(
    "cloudsecret_operator_requeue_after_seconds",
    "Requeue interval chosen at the end of a reconciliation",
    ["kind"],
    buckets=[1.0, 5.0, 15.0, 60.0, 300.0, 900.0, 3600.0],
)

# Secret resolution metrics
secret_resolution_total = Counter(
    "cloudsecret_operator_secret_resolution_total",
    "Total number of external secret resolutions",
    ["result"],
)

# Child secret metrics
child_secret_operations_total = Counter(
    "cloudsecret_operator_child_secret_operations_total",
    "Total number of child secret operations",
    ["operation", "result"],
)

# API call metrics
api_call_total = Counter(
    "cloudsecret_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "cloudsecret_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

# Error metrics
error_total = Counter(
    "cloudsecret_operator_error_total",
    "Total number of errors raised during reconciliation",
    ["kind", "error_type"],
)
