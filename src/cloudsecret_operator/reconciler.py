"""Reconciliation of a CloudSecret into the Secret it manages."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Callable

from . import metrics
from .constants import KIND_CLOUD_SECRET, RESOLUTION_RETRY_SECONDS
from .exceptions import NotFoundError, StoreError
from .handlers.base import BaseHandler
from .models import ManagedSecret, ObjectKey, init_child_secret
from .resolver import Resolved, SecretResolver, Unresolved, resolve_all
from .store import StateStore
from .tracing import add_span_attribute, trace_span

ACTION_UPDATED = "updated"
ACTION_DELETED = "deleted"


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of one reconciliation.

    ``requeue_after`` of 0 means no explicit requeue was requested.
    """

    requeue_after: float = 0.0
    child_created: bool = False
    action: str | None = None
    changed: bool = False
    resolved_keys: tuple[str, ...] = ()
    unresolved: tuple[Unresolved, ...] = ()


class CloudSecretReconciler(BaseHandler):
    """Keeps the Secret owned by a CloudSecret in sync with Secret Manager.

    The reconciler holds no state between calls: every cycle reads both
    objects fresh from the store and writes the child back at most twice
    (create, then update or delete). Store failures are raised and abort the
    cycle; resolution failures only shape the payload and the requeue delay.
    """

    def __init__(
        self,
        store: StateStore,
        resolver: SecretResolver,
        retry_after: float | None = None,
        max_workers: int | None = None,
    ) -> None:
        super().__init__(KIND_CLOUD_SECRET)
        self.store = store
        self.resolver = resolver
        if retry_after is None:
            retry_after = float(os.getenv("RESOLUTION_RETRY_SECONDS", str(RESOLUTION_RETRY_SECONDS)))
        if max_workers is None:
            max_workers = int(os.getenv("RESOLVER_MAX_WORKERS", "4"))
        self.retry_after = retry_after
        self.max_workers = max_workers

    def _write(
        self,
        meta: dict[str, Any],
        operation: str,
        fn: Callable[[ManagedSecret], Any],
        secret: ManagedSecret,
    ) -> Any:
        try:
            result = fn(secret)
        except StoreError as e:
            metrics.child_secret_operations_total.labels(operation=operation, result="error").inc()
            self.log_error(meta, f"Unable to {operation} child secret", error=e, reason="ChildSecretWriteFailed")
            raise
        metrics.child_secret_operations_total.labels(operation=operation, result="success").inc()
        return result

    def reconcile(self, key: ObjectKey) -> ReconcileResult:
        """Run one reconciliation cycle for the CloudSecret at ``key``.

        Args:
            key: Namespace and name of the CloudSecret

        Returns:
            The result, carrying the requested requeue interval

        Raises:
            StoreReadError: If either object cannot be read
            StoreWriteError: If the child secret cannot be written
        """
        meta: dict[str, Any] = {"name": key.name, "namespace": key.namespace}

        with trace_span("reconcile_cloudsecret", kind=self.kind, attributes={"cloudsecret": str(key)}):
            try:
                desired = self.store.get_desired(key)
            except NotFoundError:
                self.log_info(meta, "CloudSecret not found, nothing to do", event="skip", reason="NotFound")
                return ReconcileResult()
            except StoreError as e:
                self.log_error(meta, "Unable to fetch cloud secret", error=e, reason="FetchFailed")
                raise

            meta = desired.meta()
            requeue_after = desired.sync_period

            child_created = False
            try:
                child = self.store.get_managed(desired.child_key)
            except NotFoundError:
                self.log_info(meta, "Creating child secret", event="create", reason="CreatingChildSecret")
                child = self._write(meta, "create", self.store.create, init_child_secret(desired))
                child_created = True

            if not desired.references:
                self.log_info(meta, "Empty cloud secret", event="skip", reason="NoReferences")
                return ReconcileResult(requeue_after, child_created)

            resolutions = resolve_all(self.resolver, desired.references, self.max_workers)
            payload = {r.key: r.payload for r in resolutions if isinstance(r, Resolved)}
            unresolved = tuple(r for r in resolutions if isinstance(r, Unresolved))

            for failure in unresolved:
                self.log_error(
                    meta,
                    "Unable to access secret",
                    error=failure.error,
                    reason="ResolutionFailed",
                    key=failure.key,
                    reference=failure.reference,
                )

            # The resolver client retries on its own; requeue sooner than the
            # sync period, but never later.
            if unresolved and requeue_after > self.retry_after:
                requeue_after = self.retry_after

            add_span_attribute("cloudsecret.resolved", len(payload))
            add_span_attribute("cloudsecret.unresolved", len(unresolved))

            if not payload:
                self.log_warning(meta, "No secrets resolved, deleting child secret", event="delete", reason="NothingResolved")
                self._write(meta, "delete", self.store.delete, child)
                return ReconcileResult(
                    requeue_after, child_created, action=ACTION_DELETED, changed=True, unresolved=unresolved
                )

            changed = child.payload != payload
            child.payload = payload
            self.log_info(meta, "Updating child secret", event="update", reason="UpdatingChildSecret", keys=sorted(payload))
            self._write(meta, "update", self.store.update, child)
            return ReconcileResult(
                requeue_after,
                child_created,
                action=ACTION_UPDATED,
                changed=changed,
                resolved_keys=tuple(sorted(payload)),
                unresolved=unresolved,
            )
