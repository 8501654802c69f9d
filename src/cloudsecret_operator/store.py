"""State store backed by the Kubernetes API."""

from __future__ import annotations

import base64
import time
from typing import Any, Callable, Protocol, TypeVar

from kubernetes import client
from urllib3.exceptions import HTTPError

from . import metrics
from .constants import (
    API_GROUP,
    API_VERSION,
    CHILD_SECRET_TYPE,
    FIELD_MANAGER,
    PLURAL_CLOUD_SECRETS,
)
from .exceptions import NotFoundError, StoreReadError, StoreWriteError
from .models import DesiredSecret, ManagedSecret, ObjectKey

_T = TypeVar("_T")


class StateStore(Protocol):
    """Protocol defining the object persistence the reconciler relies on."""

    def get_desired(self, key: ObjectKey) -> DesiredSecret:
        """Read a CloudSecret. Raises NotFoundError or StoreReadError."""
        ...

    def get_managed(self, key: ObjectKey) -> ManagedSecret:
        """Read a managed Secret. Raises NotFoundError or StoreReadError."""
        ...

    def create(self, secret: ManagedSecret) -> ManagedSecret:
        """Create a managed Secret. Raises StoreWriteError."""
        ...

    def update(self, secret: ManagedSecret) -> ManagedSecret:
        """Replace a managed Secret in full. Raises StoreWriteError."""
        ...

    def delete(self, secret: ManagedSecret) -> None:
        """Delete a managed Secret. Raises StoreWriteError."""
        ...


def encode_payload(payload: dict[str, bytes]) -> dict[str, str]:
    """Base64-encode Secret data for the Kubernetes API."""
    return {k: base64.b64encode(v).decode("ascii") for k, v in payload.items()}


def decode_payload(data: dict[str, Any] | None) -> dict[str, bytes]:
    """Decode Secret data returned by the Kubernetes API."""
    result = {}
    for key, value in (data or {}).items():
        if isinstance(value, bytes):
            result[key] = value
        else:
            result[key] = base64.b64decode(value)
    return result


class KubernetesStateStore:
    """Reads CloudSecrets and reads/writes their Secrets through the Kubernetes API."""

    def __init__(
        self,
        custom_api: client.CustomObjectsApi,
        core_api: client.CoreV1Api,
    ) -> None:
        self.custom_api = custom_api
        self.core_api = core_api

    def _call(self, operation: str, fn: Callable[..., _T], **kwargs: Any) -> _T:
        start_time = time.time()
        try:
            result = fn(**kwargs)
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="success").inc()
            return result
        except Exception:
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="error").inc()
            raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation=operation).observe(duration)

    def get_desired(self, key: ObjectKey) -> DesiredSecret:
        try:
            obj = self._call(
                "get_cloudsecret",
                self.custom_api.get_namespaced_custom_object,
                group=API_GROUP,
                version=API_VERSION,
                namespace=key.namespace,
                plural=PLURAL_CLOUD_SECRETS,
                name=key.name,
            )
        except client.exceptions.ApiException as e:
            if e.status == 404:
                raise NotFoundError(f"CloudSecret '{key}' not found") from e
            raise StoreReadError(f"Failed to read CloudSecret '{key}': {e.reason}") from e
        except HTTPError as e:
            raise StoreReadError(f"Failed to read CloudSecret '{key}': {e}") from e
        return DesiredSecret.from_resource(obj)

    def get_managed(self, key: ObjectKey) -> ManagedSecret:
        try:
            secret = self._call(
                "get_secret",
                self.core_api.read_namespaced_secret,
                name=key.name,
                namespace=key.namespace,
            )
        except client.exceptions.ApiException as e:
            if e.status == 404:
                raise NotFoundError(f"Secret '{key}' not found") from e
            raise StoreReadError(f"Failed to read Secret '{key}': {e.reason}") from e
        except HTTPError as e:
            raise StoreReadError(f"Failed to read Secret '{key}': {e}") from e

        meta = secret.metadata
        return ManagedSecret(
            key=key,
            payload=decode_payload(secret.data),
            owner_references=list(meta.owner_references or []),
            labels=dict(meta.labels or {}),
            resource_version=meta.resource_version,
        )

    def _to_body(self, secret: ManagedSecret) -> client.V1Secret:
        return client.V1Secret(
            api_version="v1",
            kind="Secret",
            metadata=client.V1ObjectMeta(
                name=secret.key.name,
                namespace=secret.key.namespace,
                labels=secret.labels or None,
                owner_references=secret.owner_references or None,
                resource_version=secret.resource_version,
            ),
            type=CHILD_SECRET_TYPE,
            data=encode_payload(secret.payload),
        )

    def create(self, secret: ManagedSecret) -> ManagedSecret:
        try:
            created = self._call(
                "create_secret",
                self.core_api.create_namespaced_secret,
                namespace=secret.key.namespace,
                body=self._to_body(secret),
                field_manager=FIELD_MANAGER,
            )
        except client.exceptions.ApiException as e:
            raise StoreWriteError(f"Failed to create Secret '{secret.key}': {e.reason}") from e
        except HTTPError as e:
            raise StoreWriteError(f"Failed to create Secret '{secret.key}': {e}") from e
        secret.resource_version = created.metadata.resource_version
        return secret

    def update(self, secret: ManagedSecret) -> ManagedSecret:
        # Replace rather than patch: a strategic merge patch would keep keys
        # that are no longer resolved.
        try:
            replaced = self._call(
                "replace_secret",
                self.core_api.replace_namespaced_secret,
                name=secret.key.name,
                namespace=secret.key.namespace,
                body=self._to_body(secret),
                field_manager=FIELD_MANAGER,
            )
        except client.exceptions.ApiException as e:
            raise StoreWriteError(f"Failed to update Secret '{secret.key}': {e.reason}") from e
        except HTTPError as e:
            raise StoreWriteError(f"Failed to update Secret '{secret.key}': {e}") from e
        secret.resource_version = replaced.metadata.resource_version
        return secret

    def delete(self, secret: ManagedSecret) -> None:
        try:
            self._call(
                "delete_secret",
                self.core_api.delete_namespaced_secret,
                name=secret.key.name,
                namespace=secret.key.namespace,
            )
        except client.exceptions.ApiException as e:
            if e.status == 404:
                return
            raise StoreWriteError(f"Failed to delete Secret '{secret.key}': {e.reason}") from e
        except HTTPError as e:
            raise StoreWriteError(f"Failed to delete Secret '{secret.key}': {e}") from e


def get_state_store() -> KubernetesStateStore:
    """Build a KubernetesStateStore from in-cluster or kubeconfig credentials."""
    from kubernetes import config

    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()

    return KubernetesStateStore(client.CustomObjectsApi(), client.CoreV1Api())
