"""Shared fixtures: in-memory state store and resolver fakes."""

from __future__ import annotations

from dataclasses import replace

import pytest

from cloudsecret_operator.exceptions import (
    NotFoundError,
    ResolutionError,
    StoreReadError,
    StoreWriteError,
)
from cloudsecret_operator.models import DesiredSecret, ManagedSecret, ObjectKey


class InMemoryStateStore:
    """StateStore keeping objects in dicts, with per-operation failure injection."""

    def __init__(self) -> None:
        self.desired: dict[ObjectKey, DesiredSecret] = {}
        self.managed: dict[ObjectKey, ManagedSecret] = {}
        self.fail_on: set[str] = set()
        self.calls: list[tuple[str, ObjectKey]] = []

    def add_desired(
        self,
        name: str = "db-creds",
        namespace: str = "default",
        sync_period: float = 60,
        references: dict[str, str] | None = None,
    ) -> DesiredSecret:
        desired = DesiredSecret(
            key=ObjectKey(namespace, name),
            uid="uid-1234",
            sync_period=sync_period,
            references=references or {},
        )
        self.desired[desired.key] = desired
        return desired

    def add_managed(self, key: ObjectKey, payload: dict[str, bytes]) -> ManagedSecret:
        secret = ManagedSecret(key=key, payload=dict(payload), resource_version="1")
        self.managed[key] = secret
        return secret

    @property
    def writes(self) -> list[tuple[str, ObjectKey]]:
        return [call for call in self.calls if call[0] in ("create", "update", "delete")]

    def get_desired(self, key: ObjectKey) -> DesiredSecret:
        self.calls.append(("get_desired", key))
        if "get_desired" in self.fail_on:
            raise StoreReadError("apiserver unavailable")
        if key not in self.desired:
            raise NotFoundError(f"CloudSecret '{key}' not found")
        return self.desired[key]

    def get_managed(self, key: ObjectKey) -> ManagedSecret:
        self.calls.append(("get_managed", key))
        if "get_managed" in self.fail_on:
            raise StoreReadError("apiserver unavailable")
        if key not in self.managed:
            raise NotFoundError(f"Secret '{key}' not found")
        stored = self.managed[key]
        return replace(stored, payload=dict(stored.payload))

    def create(self, secret: ManagedSecret) -> ManagedSecret:
        self.calls.append(("create", secret.key))
        if "create" in self.fail_on:
            raise StoreWriteError("create rejected")
        secret.resource_version = "1"
        self.managed[secret.key] = replace(secret, payload=dict(secret.payload))
        return secret

    def update(self, secret: ManagedSecret) -> ManagedSecret:
        self.calls.append(("update", secret.key))
        if "update" in self.fail_on:
            raise StoreWriteError("update rejected")
        self.managed[secret.key] = replace(secret, payload=dict(secret.payload))
        return secret

    def delete(self, secret: ManagedSecret) -> None:
        self.calls.append(("delete", secret.key))
        if "delete" in self.fail_on:
            raise StoreWriteError("delete rejected")
        self.managed.pop(secret.key, None)


class DictResolver:
    """SecretResolver answering from a dict; missing references fail."""

    def __init__(self, answers: dict[str, bytes] | None = None) -> None:
        self.answers = dict(answers or {})
        self.calls: list[str] = []

    def resolve(self, reference: str) -> bytes:
        self.calls.append(reference)
        if reference not in self.answers:
            raise ResolutionError(f"Secret version '{reference}' not found")
        return self.answers[reference]


@pytest.fixture
def store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def resolver() -> DictResolver:
    return DictResolver()
