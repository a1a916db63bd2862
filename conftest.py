"""
Root-level shared test fixtures.

Provides an in-memory SecretStore that records every write, so tests can
assert on exactly which store calls a migration made.
"""

from typing import Iterator, Optional

import pytest

from secret_migrate.config import LATEST_VERSION, REPLICATION_AUTOMATIC
from secret_migrate.retry import RetryConfiguration
from secret_migrate.store.base import SecretStore
from secret_migrate.store.exceptions import NotFoundError, SecretAlreadyExistsError
from secret_migrate.store.models import StoredSecret


class InMemorySecretStore(SecretStore):
    """Dict-backed SecretStore with call recording and failure injection."""

    def __init__(self):
        self.scopes: dict[str, dict[str, dict]] = {}
        self.created: list[tuple[str, str]] = []
        self.versions_added: list[tuple[str, str]] = []
        self.list_calls: list[str] = []
        self.failures: dict[str, Exception] = {}
        self.closed = False

    def seed(
        self,
        scope: str,
        secret_id: str,
        labels: dict[str, str],
        payload: Optional[str] = None,
    ) -> None:
        """Place a secret directly in the store without recording a write."""
        versions = [payload.encode("utf-8")] if payload is not None else []
        self.scopes.setdefault(scope, {})[secret_id] = {"labels": dict(labels), "versions": versions}

    def secrets_in(self, scope: str) -> dict[str, dict]:
        return self.scopes.get(scope, {})

    def payload(self, scope: str, secret_id: str) -> str:
        return self.scopes[scope][secret_id]["versions"][-1].decode("utf-8")

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.failures:
            raise self.failures[operation]

    def list_secrets(self, scope: str) -> Iterator[StoredSecret]:
        self.list_calls.append(scope)
        self._maybe_fail("list_secrets")
        for secret_id, secret in list(self.secrets_in(scope).items()):
            yield StoredSecret(name=f"projects/{scope}/secrets/{secret_id}", labels=secret["labels"])

    def create_secret(self, scope, secret_id, labels, replication=REPLICATION_AUTOMATIC):
        self._maybe_fail("create_secret")
        if secret_id in self.secrets_in(scope):
            raise SecretAlreadyExistsError(scope, secret_id)
        self.scopes.setdefault(scope, {})[secret_id] = {
            "labels": dict(labels),
            "versions": [],
            "replication": replication,
        }
        self.created.append((scope, secret_id))

    def add_secret_version(self, scope, secret_id, payload):
        self._maybe_fail("add_secret_version")
        if secret_id not in self.secrets_in(scope):
            raise NotFoundError("add_secret_version", scope, secret_id)
        self.scopes[scope][secret_id]["versions"].append(payload)
        self.versions_added.append((scope, secret_id))

    def access_secret_version(self, scope, secret_id, version=LATEST_VERSION):
        self._maybe_fail("access_secret_version")
        secret = self.secrets_in(scope).get(secret_id)
        if secret is None or not secret["versions"]:
            raise NotFoundError("access_secret_version", scope, secret_id)
        return secret["versions"][-1]

    def close(self):
        self.closed = True


@pytest.fixture
def store():
    """Empty in-memory secret store."""
    return InMemorySecretStore()


@pytest.fixture
def make_store():
    """Factory for additional independent in-memory stores."""
    return InMemorySecretStore


@pytest.fixture
def tenant_labels():
    """Labels of a tenant credential as they appear in the source store."""
    def build(key: str, tenant: Optional[str] = "acme", is_global: Optional[str] = "false") -> dict:
        labels = {"display-name": key}
        if tenant is not None:
            labels["tenant-name"] = tenant
        if is_global is not None:
            labels["global"] = is_global
        return labels
    return build


@pytest.fixture
def mapping_csv(tmp_path):
    """Write CSV mapping rows to a temporary file and return its path."""
    def write(content: str) -> str:
        path = tmp_path / "mapping.csv"
        path.write_text(content)
        return str(path)
    return write


@pytest.fixture
def fast_retry(monkeypatch):
    """Make store retries immediate."""
    monkeypatch.setattr(
        RetryConfiguration,
        "from_env",
        classmethod(lambda cls: cls(max_attempts=3, base_delay=0.01, max_delay=0.01, jitter=0)),
    )
