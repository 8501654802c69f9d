"""Resolution of external secret references through Google Cloud Secret Manager."""

from __future__ import annotations

import contextvars
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Mapping, Protocol, Union

from google.api_core.exceptions import GoogleAPIError, NotFound, PermissionDenied
from google.cloud import secretmanager_v1

from . import metrics
from .exceptions import ResolutionError
from .tracing import trace_span

logger = logging.getLogger(__name__)


class SecretResolver(Protocol):
    """Protocol for anything that turns an external reference into secret bytes."""

    def resolve(self, reference: str) -> bytes:
        """Return the payload for ``reference``. Raises ResolutionError."""
        ...


class GcpSecretResolver:
    """Resolves Secret Manager version names into their payloads.

    References are full version resource names, e.g.
    ``projects/my-project/secrets/db-password/versions/latest``. The client's
    default retry policy handles transient failures; any error surfacing from
    it is final for the current reconciliation.

    Attributes:
        client: Secret Manager client used for ``access_secret_version``.
        timeout: Per-call deadline in seconds.
    """

    def __init__(
        self,
        client: secretmanager_v1.SecretManagerServiceClient | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            client: Optional preconfigured client. Application default
                credentials are used when omitted.
            timeout: Optional per-call timeout; defaults to
                ``GCP_SECRET_TIMEOUT_SECONDS`` (30).
        """
        self.client = client or secretmanager_v1.SecretManagerServiceClient()
        if timeout is None:
            timeout = float(os.getenv("GCP_SECRET_TIMEOUT_SECONDS", "30"))
        self.timeout = timeout

    def resolve(self, reference: str) -> bytes:
        """Access a secret version.

        Args:
            reference: Secret version resource name.

        Returns:
            The raw payload bytes.

        Raises:
            ResolutionError: If the version cannot be accessed.
        """
        start_time = time.time()
        try:
            response = self.client.access_secret_version(name=reference, timeout=self.timeout)
            metrics.api_call_total.labels(api_type="gcp", operation="access_secret_version", result="success").inc()
            return response.payload.data
        except NotFound as e:
            metrics.api_call_total.labels(api_type="gcp", operation="access_secret_version", result="error").inc()
            raise ResolutionError(f"Secret version '{reference}' not found") from e
        except PermissionDenied as e:
            metrics.api_call_total.labels(api_type="gcp", operation="access_secret_version", result="error").inc()
            raise ResolutionError(f"Permission denied accessing '{reference}'") from e
        except GoogleAPIError as e:
            metrics.api_call_total.labels(api_type="gcp", operation="access_secret_version", result="error").inc()
            raise ResolutionError(f"Failed to access '{reference}': {e}") from e
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="gcp", operation="access_secret_version").observe(duration)


@dataclass(frozen=True)
class Resolved:
    """A key whose reference resolved."""

    key: str
    reference: str
    payload: bytes


@dataclass(frozen=True)
class Unresolved:
    """A key whose reference failed to resolve this cycle."""

    key: str
    reference: str
    error: ResolutionError


Resolution = Union[Resolved, Unresolved]


def resolve_reference(resolver: SecretResolver, key: str, reference: str) -> Resolution:
    """Resolve one reference, capturing any failure as an Unresolved result."""
    with trace_span("resolve_secret", attributes={"secret.key": key}):
        try:
            payload = resolver.resolve(reference)
        except ResolutionError as e:
            metrics.secret_resolution_total.labels(result="error").inc()
            return Unresolved(key, reference, e)
        except Exception as e:
            metrics.secret_resolution_total.labels(result="error").inc()
            error = ResolutionError(f"Failed to resolve '{reference}': {e}")
            error.__cause__ = e
            return Unresolved(key, reference, error)
    metrics.secret_resolution_total.labels(result="success").inc()
    return Resolved(key, reference, payload)


def resolve_all(
    resolver: SecretResolver,
    references: Mapping[str, str],
    max_workers: int = 1,
) -> list[Resolution]:
    """Resolve every reference; a failure never prevents the others from being attempted.

    Args:
        resolver: Resolver to use
        references: Mapping of logical key to external reference
        max_workers: Number of threads to resolve with (1 resolves sequentially)

    Returns:
        One result per key, in the iteration order of ``references``
    """
    items = list(references.items())
    if max_workers <= 1 or len(items) <= 1:
        return [resolve_reference(resolver, key, ref) for key, ref in items]

    with ThreadPoolExecutor(max_workers=min(max_workers, len(items))) as executor:
        # Each task runs in a copy of the caller's context so resolve spans nest
        # under the active reconcile span.
        futures = [
            executor.submit(contextvars.copy_context().run, resolve_reference, resolver, key, ref)
            for key, ref in items
        ]
        return [future.result() for future in futures]
