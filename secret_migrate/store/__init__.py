"""Secret store backends.

Backend modules (``gcp``, ``vault``) are imported on demand by
``create_store`` so only the SDK for the selected backend is loaded.
"""

from typing import Optional

from secret_migrate import config as settings
from secret_migrate.store.base import SecretStore
from secret_migrate.store.exceptions import (
    NotFoundError,
    SecretAlreadyExistsError,
    StoreAuthenticationError,
    StoreError,
    StoreOperationError,
    TransientStoreError,
)
from secret_migrate.store.models import StoredSecret, VaultConnectionConfig

BACKENDS = ("gcp", "vault")


def create_store(
    backend: Optional[str] = None,
    vault_config: Optional[VaultConnectionConfig] = None,
) -> SecretStore:
    """Build the configured SecretStore.

    Args:
        backend: "gcp" or "vault"; defaults to SECRET_STORE_BACKEND.
        vault_config: Vault settings; built from VAULT_* settings when omitted.

    Returns:
        A ready-to-use SecretStore.
    """
    backend = backend or settings.SECRET_STORE_BACKEND

    if backend == "gcp":
        from secret_migrate.store.gcp import GoogleSecretManagerStore

        return GoogleSecretManagerStore()

    if backend == "vault":
        from secret_migrate.store.vault import VaultKVStore

        if vault_config is None:
            vault_config = VaultConnectionConfig(
                vault_addr=settings.VAULT_ADDR,
                auth_method=settings.VAULT_AUTH_METHOD,
                role_id=settings.VAULT_ROLE_ID,
                secret_id=settings.VAULT_SECRET_ID,
                token=settings.VAULT_TOKEN,
                namespace=settings.VAULT_NAMESPACE,
                mount_point=settings.VAULT_MOUNT_POINT,
            )
        return VaultKVStore(vault_config)

    raise ValueError(f"Unknown secret store backend: {backend}. Must be one of {BACKENDS}")


__all__ = [
    "BACKENDS",
    "create_store",
    "SecretStore",
    "StoredSecret",
    "VaultConnectionConfig",
    "StoreError",
    "StoreOperationError",
    "NotFoundError",
    "SecretAlreadyExistsError",
    "StoreAuthenticationError",
    "TransientStoreError",
]
