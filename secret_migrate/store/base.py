"""Abstract secret store consumed by the migration engine."""

from abc import ABC, abstractmethod
from typing import Iterator

from secret_migrate.config import LATEST_VERSION, REPLICATION_AUTOMATIC
from secret_migrate.store.models import StoredSecret


class SecretStore(ABC):
    """Primitive operations the migration needs from a secret store.

    A scope is the unit a store partitions secrets by: a project id for
    Google Secret Manager, a path under the KV mount for Vault. Backends
    raise only exceptions from ``secret_migrate.store.exceptions``.
    """

    @abstractmethod
    def list_secrets(self, scope: str) -> Iterator[StoredSecret]:
        """Lazily yield metadata for every secret visible in ``scope``."""

    @abstractmethod
    def create_secret(
        self,
        scope: str,
        secret_id: str,
        labels: dict[str, str],
        replication: str = REPLICATION_AUTOMATIC,
    ) -> None:
        """Create an empty secret container.

        Raises:
            SecretAlreadyExistsError: If ``secret_id`` is already taken in ``scope``.
        """

    @abstractmethod
    def add_secret_version(self, scope: str, secret_id: str, payload: bytes) -> None:
        """Write ``payload`` as the newest version of an existing secret."""

    @abstractmethod
    def access_secret_version(
        self,
        scope: str,
        secret_id: str,
        version: str = LATEST_VERSION,
    ) -> bytes:
        """Return the payload of a secret version.

        Raises:
            NotFoundError: If the secret or the requested version does not exist.
        """

    def close(self) -> None:
        """Release client resources."""

    def __enter__(self) -> "SecretStore":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
