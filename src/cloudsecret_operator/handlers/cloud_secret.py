"""Handler for CloudSecret CRD."""

from __future__ import annotations

import asyncio
from typing import Any

import kopf

from .. import metrics
from ..constants import API_GROUP, API_VERSION, KIND_CLOUD_SECRET, PLURAL_CLOUD_SECRETS
from ..exceptions import StoreError
from ..models import ObjectKey
from ..reconciler import ACTION_DELETED, ACTION_UPDATED, CloudSecretReconciler, ReconcileResult
from ..resolver import GcpSecretResolver
from ..store import get_state_store
from ..utils.errors import sanitize_exception
from ..utils.events import (
    emit_child_secret_created,
    emit_child_secret_deleted,
    emit_child_secret_updated,
    emit_resolution_failed,
)

# Global reconciler instance, built at operator startup
_reconciler: CloudSecretReconciler | None = None


def init_reconciler(reconciler: CloudSecretReconciler | None = None) -> CloudSecretReconciler:
    """Install the reconciler used by the daemons, building the default one if none is given."""
    global _reconciler
    if reconciler is None:
        reconciler = CloudSecretReconciler(get_state_store(), GcpSecretResolver())
    _reconciler = reconciler
    return reconciler


def get_reconciler() -> CloudSecretReconciler:
    if _reconciler is None:
        return init_reconciler()
    return _reconciler


def sync(
    reconciler: CloudSecretReconciler,
    body: dict[str, Any],
    key: ObjectKey,
) -> ReconcileResult:
    """Reconcile once and report the outcome as Kubernetes events."""
    result = reconciler.reconcile_with_metrics(body, lambda: reconciler.reconcile(key))

    if result.child_created:
        emit_child_secret_created(body, key.name)
    for failure in result.unresolved:
        emit_resolution_failed(body, failure.key, sanitize_exception(failure.error))
    if result.action == ACTION_DELETED:
        emit_child_secret_deleted(body, key.name)
    elif result.action == ACTION_UPDATED and result.changed:
        emit_child_secret_updated(body, key.name, len(result.resolved_keys))

    metrics.requeue_after_seconds.labels(kind=KIND_CLOUD_SECRET).observe(result.requeue_after)
    return result


@kopf.daemon(API_GROUP, API_VERSION, PLURAL_CLOUD_SECRETS, cancellation_timeout=10.0)
async def run_cloud_secret_sync(
    name: str,
    namespace: str,
    body: kopf.Body,
    stopped: kopf.DaemonStopped,
    **kwargs: Any,
) -> None:
    """Keep one CloudSecret's child secret in sync for as long as the CloudSecret exists.

    Each cycle runs in a worker thread so that long-lived daemons do not hold
    kopf's sync executor.
    """
    key = ObjectKey(namespace, name)
    reconciler = get_reconciler()

    while not stopped:
        try:
            result = await asyncio.to_thread(sync, reconciler, dict(body), key)
        except StoreError as e:
            raise kopf.TemporaryError(sanitize_exception(e)) from e

        if result.requeue_after <= 0:
            return
        await stopped.wait(result.requeue_after)
