"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_CHILD_SECRET_CREATED,
    EVENT_REASON_CHILD_SECRET_DELETED,
    EVENT_REASON_CHILD_SECRET_UPDATED,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RESOLUTION_FAILED,
)


def emit_event(
    body: Any,
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Resource body (or anything kopf can build an object reference from)
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_failed(body: Any, message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(body, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_child_secret_created(body: Any, secret_name: str) -> None:
    """Emit child secret created event."""
    emit_event(body, EVENT_REASON_CHILD_SECRET_CREATED, f"Secret {secret_name} created")


def emit_child_secret_updated(body: Any, secret_name: str, keys: int) -> None:
    """Emit child secret updated event."""
    emit_event(body, EVENT_REASON_CHILD_SECRET_UPDATED, f"Secret {secret_name} updated with {keys} key(s)")


def emit_child_secret_deleted(body: Any, secret_name: str) -> None:
    """Emit child secret deleted event."""
    emit_event(
        body,
        EVENT_REASON_CHILD_SECRET_DELETED,
        f"Secret {secret_name} deleted: no references could be resolved",
        type_="Warning",
    )


def emit_resolution_failed(body: Any, key: str, message: str) -> None:
    """Emit resolution failed event for a single key."""
    emit_event(body, EVENT_REASON_RESOLUTION_FAILED, f"Unable to resolve key {key}: {message}", type_="Warning")
