"""Utility functions for the CloudSecret Operator."""

from .errors import sanitize_dict, sanitize_error_message, sanitize_exception
from .events import (
    emit_child_secret_created,
    emit_child_secret_deleted,
    emit_child_secret_updated,
    emit_event,
    emit_reconcile_failed,
    emit_resolution_failed,
)

__all__ = [
    "emit_event",
    "emit_reconcile_failed",
    "emit_child_secret_created",
    "emit_child_secret_updated",
    "emit_child_secret_deleted",
    "emit_resolution_failed",
    "sanitize_error_message",
    "sanitize_exception",
    "sanitize_dict",
]
