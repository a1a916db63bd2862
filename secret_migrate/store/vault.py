"""HashiCorp Vault KV v2 backend.

A scope is a folder under the KV mount point. Store labels live in the
secret's ``custom_metadata`` and the payload is written as ``{"value": ...}``.
Creating a secret writes metadata only, so a secret can exist with no
versions, the same as in Secret Manager.
"""

import logging
from threading import Lock
from typing import Iterator, Optional

import hvac
import requests
from hvac.exceptions import (
    Forbidden,
    InternalServerError,
    InvalidPath,
    RateLimitExceeded,
    Unauthorized,
    VaultDown,
)
from hvac.exceptions import VaultError as HvacVaultError

from secret_migrate.config import LATEST_VERSION, REPLICATION_AUTOMATIC
from secret_migrate.store.base import SecretStore
from secret_migrate.store.exceptions import (
    NotFoundError,
    SecretAlreadyExistsError,
    StoreAuthenticationError,
    StoreOperationError,
    TransientStoreError,
)
from secret_migrate.store.models import StoredSecret, VaultConnectionConfig

logger = logging.getLogger(__name__)

KUBERNETES_TOKEN_PATH = "/var/run/secrets/kubernetes.io/serviceaccount/token"
PAYLOAD_FIELD = "value"


def translate_vault_error(
    error: Exception,
    operation: str,
    scope: str,
    secret_id: Optional[str] = None,
) -> StoreOperationError:
    """Map hvac/requests exceptions onto the store exception hierarchy."""
    details = {"cause": type(error).__name__}
    if isinstance(error, InvalidPath):
        return NotFoundError(operation, scope, secret_id, details=details)
    if isinstance(error, (Forbidden, Unauthorized)):
        return StoreAuthenticationError(
            f"Access denied for '{operation}' on {scope}: {error}", scope, details
        )
    if isinstance(error, (VaultDown, InternalServerError, RateLimitExceeded, requests.RequestException)):
        return TransientStoreError(
            operation, scope, secret_id, f"Transient failure in '{operation}': {error}", details
        )
    return StoreOperationError(
        operation, scope, secret_id, f"Store operation '{operation}' failed: {error}", details
    )


class VaultKVStore(SecretStore):
    """SecretStore backed by a HashiCorp Vault KV v2 mount.

    Example:
        >>> config = VaultConnectionConfig(
        ...     vault_addr="https://vault.example.com:8200",
        ...     auth_method="token",
        ...     token="s.xxxx",
        ... )
        >>> store = VaultKVStore(config)
        >>> payload = store.access_secret_version("tenants/acme", "acme-api-key")
    """

    def __init__(self, config: VaultConnectionConfig, client: Optional[hvac.Client] = None):
        """Initialize the store.

        Args:
            config: Connection configuration
            client: Pre-built hvac client (skips authentication when given)
        """
        self.config = config
        self._client = client
        self._auth_lock = Lock()
        self._authenticated = client is not None

    def _get_client(self) -> hvac.Client:
        """Get or create the underlying hvac client."""
        if self._client is None:
            with self._auth_lock:
                if self._client is None:
                    self._client = hvac.Client(
                        url=self.config.vault_addr,
                        verify=self.config.verify,
                        timeout=self.config.timeout,
                        namespace=self.config.namespace,
                    )
        return self._client

    def _authenticate(self) -> None:
        """Authenticate with Vault using the configured method."""
        client = self._get_client()

        if self.config.auth_method == "approle":
            if not self.config.role_id or not self.config.secret_id:
                raise StoreAuthenticationError(
                    "AppRole authentication requires role_id and secret_id"
                )
            response = client.auth.approle.login(
                role_id=self.config.role_id,
                secret_id=self.config.secret_id,
            )
            client.token = response["auth"]["client_token"]

        elif self.config.auth_method == "token":
            if not self.config.token:
                raise StoreAuthenticationError("Token authentication requires token")
            client.token = self.config.token

        elif self.config.auth_method == "kubernetes":
            with open(KUBERNETES_TOKEN_PATH) as f:
                jwt = f.read().strip()
            response = client.auth.kubernetes.login(
                role=self.config.role_id or "default",
                jwt=jwt,
            )
            client.token = response["auth"]["client_token"]

        else:
            raise StoreAuthenticationError(
                f"Unsupported authentication method: {self.config.auth_method}"
            )

        self._authenticated = True
        logger.info("Successfully authenticated to Vault")

    @property
    def client(self) -> hvac.Client:
        """Authenticated hvac client."""
        if not self._authenticated:
            self._authenticate()
        return self._get_client()

    @property
    def kv(self):
        return self.client.secrets.kv.v2

    @staticmethod
    def _path(scope: str, secret_id: Optional[str] = None) -> str:
        scope = scope.strip("/")
        return f"{scope}/{secret_id}" if secret_id else scope

    def list_secrets(self, scope: str) -> Iterator[StoredSecret]:
        try:
            response = self.kv.list_secrets(
                path=self._path(scope),
                mount_point=self.config.mount_point,
            )
        except InvalidPath:
            return
        except (HvacVaultError, requests.RequestException) as e:
            raise translate_vault_error(e, "list_secrets", scope) from e

        for key in response.get("data", {}).get("keys", []):
            # Trailing slash marks a nested folder, not a secret
            if key.endswith("/"):
                continue
            path = self._path(scope, key)
            try:
                metadata = self.kv.read_secret_metadata(
                    path=path,
                    mount_point=self.config.mount_point,
                )
            except (HvacVaultError, requests.RequestException) as e:
                raise translate_vault_error(e, "list_secrets", scope, key) from e
            labels = metadata.get("data", {}).get("custom_metadata") or {}
            yield StoredSecret(name=path, labels=labels)

    def create_secret(
        self,
        scope: str,
        secret_id: str,
        labels: dict[str, str],
        replication: str = REPLICATION_AUTOMATIC,
    ) -> None:
        if replication != REPLICATION_AUTOMATIC:
            raise ValueError(f"Unsupported replication policy: {replication}")

        path = self._path(scope, secret_id)
        try:
            self.kv.read_secret_metadata(path=path, mount_point=self.config.mount_point)
        except InvalidPath:
            pass
        except (HvacVaultError, requests.RequestException) as e:
            raise translate_vault_error(e, "create_secret", scope, secret_id) from e
        else:
            raise SecretAlreadyExistsError(scope, secret_id)

        try:
            self.kv.update_metadata(
                path=path,
                custom_metadata=dict(labels),
                mount_point=self.config.mount_point,
            )
        except (HvacVaultError, requests.RequestException) as e:
            raise translate_vault_error(e, "create_secret", scope, secret_id) from e
        logger.debug(f"Created secret metadata at {self.config.mount_point}/{path}")

    def add_secret_version(self, scope: str, secret_id: str, payload: bytes) -> None:
        try:
            self.kv.create_or_update_secret(
                path=self._path(scope, secret_id),
                secret={PAYLOAD_FIELD: payload.decode("utf-8")},
                mount_point=self.config.mount_point,
            )
        except (HvacVaultError, requests.RequestException) as e:
            raise translate_vault_error(e, "add_secret_version", scope, secret_id) from e

    def access_secret_version(
        self,
        scope: str,
        secret_id: str,
        version: str = LATEST_VERSION,
    ) -> bytes:
        kv_version = None if version == LATEST_VERSION else int(version)
        try:
            response = self.kv.read_secret_version(
                path=self._path(scope, secret_id),
                version=kv_version,
                mount_point=self.config.mount_point,
                raise_on_deleted_version=True,
            )
        except (HvacVaultError, requests.RequestException) as e:
            raise translate_vault_error(e, "access_secret_version", scope, secret_id) from e

        data = response.get("data", {}).get("data") or {}
        if PAYLOAD_FIELD not in data:
            raise NotFoundError(
                "access_secret_version",
                scope,
                secret_id,
                message=f"Secret {scope}/{secret_id} has no '{PAYLOAD_FIELD}' field",
            )
        return str(data[PAYLOAD_FIELD]).encode("utf-8")

    def close(self) -> None:
        """Drop the client and its token."""
        if self._client is not None:
            self._client.adapter.close()
            self._client = None
        self._authenticated = False
        logger.info("Vault client closed")
