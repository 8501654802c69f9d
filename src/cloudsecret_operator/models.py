"""Data model for CloudSecret resources and the Secrets derived from them."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from .constants import (
    API_GROUP_VERSION,
    CONTROLLER_NAME,
    DEFAULT_SYNC_PERIOD_SECONDS,
    KIND_CLOUD_SECRET,
    LABEL_MANAGED_BY,
)


@dataclass(frozen=True)
class ObjectKey:
    """Namespace and name identifying an object in the cluster."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


def child_secret_name(name: str) -> str:
    """Name of the Secret managed on behalf of the CloudSecret ``name``.

    The child shares its parent's name; the two live under different kinds so
    they never collide.
    """
    return name


def parse_sync_period(value: Any) -> float:
    """Parse ``spec.syncPeriod`` (seconds), falling back to the default when unusable."""
    default = float(os.getenv("DEFAULT_SYNC_PERIOD_SECONDS", str(DEFAULT_SYNC_PERIOD_SECONDS)))
    try:
        period = float(value)
    except (TypeError, ValueError):
        return default
    if period <= 0:
        return default
    return period


@dataclass(frozen=True)
class DesiredSecret:
    """A CloudSecret as read from the cluster. Never written back."""

    key: ObjectKey
    uid: str
    sync_period: float
    references: Mapping[str, str] = field(default_factory=dict)

    @property
    def child_key(self) -> ObjectKey:
        return ObjectKey(self.key.namespace, child_secret_name(self.key.name))

    @classmethod
    def from_resource(cls, obj: Mapping[str, Any]) -> DesiredSecret:
        """Build from a CloudSecret custom object (as returned by CustomObjectsApi).

        Args:
            obj: CloudSecret object

        Returns:
            DesiredSecret for the object
        """
        meta = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        return cls(
            key=ObjectKey(meta.get("namespace", "default"), meta["name"]),
            uid=meta.get("uid", ""),
            sync_period=parse_sync_period(spec.get("syncPeriod")),
            references={str(k): str(v) for k, v in (spec.get("data") or {}).items()},
        )

    def owner_reference(self) -> dict[str, Any]:
        """Controller owner reference placed on the child Secret."""
        return {
            "apiVersion": API_GROUP_VERSION,
            "kind": KIND_CLOUD_SECRET,
            "name": self.key.name,
            "uid": self.uid,
            "controller": True,
            "blockOwnerDeletion": True,
        }

    def object_reference(self) -> dict[str, Any]:
        """Minimal body used to attach events to this CloudSecret."""
        return {
            "apiVersion": API_GROUP_VERSION,
            "kind": KIND_CLOUD_SECRET,
            "metadata": {
                "name": self.key.name,
                "namespace": self.key.namespace,
                "uid": self.uid,
            },
        }

    def meta(self) -> dict[str, Any]:
        return self.object_reference()["metadata"]


@dataclass
class ManagedSecret:
    """The Secret materialized from a CloudSecret."""

    key: ObjectKey
    payload: dict[str, bytes] = field(default_factory=dict)
    owner_references: list[Any] = field(default_factory=list)
    labels: dict[str, str] = field(default_factory=dict)
    resource_version: str | None = None


def init_child_secret(desired: DesiredSecret) -> ManagedSecret:
    """Build the empty Secret owned by ``desired``."""
    return ManagedSecret(
        key=desired.child_key,
        owner_references=[desired.owner_reference()],
        labels={LABEL_MANAGED_BY: CONTROLLER_NAME},
    )
