"""Dagster resource that provides the configured SecretStore."""

import logging
from typing import Optional

from dagster import Field, ResourceDefinition

from secret_migrate import config as settings
from secret_migrate.store import BACKENDS, SecretStore, VaultConnectionConfig, create_store

logger = logging.getLogger(__name__)


def secret_store_resource(backend: Optional[str] = None) -> ResourceDefinition:
    """Create a Dagster resource definition for the secret store.

    Vault credentials are always taken from the VAULT_* environment settings;
    run config only selects the backend, the Vault address and the mount.

    Args:
        backend: Default backend when run config does not choose one.

    Returns:
        ResourceDefinition yielding a SecretStore, closed at the end of the run.

    Example:
        >>> from dagster import Definitions
        >>> defs = Definitions(
        ...     jobs=[tenant_secret_migration_job],
        ...     resources={
        ...         "secret_store": secret_store_resource().configured({"backend": "vault"})
        ...     },
        ... )
    """
    default_backend = backend or settings.SECRET_STORE_BACKEND

    def create_resource(context):
        """Resource creation function for Dagster."""
        run_config = context.resource_config or {}
        selected = run_config.get("backend", default_backend)
        if selected not in BACKENDS:
            raise ValueError(f"Unknown secret store backend: {selected}")

        vault_config = None
        if selected == "vault":
            vault_config = VaultConnectionConfig(
                vault_addr=run_config.get("vault_addr", settings.VAULT_ADDR),
                auth_method=settings.VAULT_AUTH_METHOD,
                role_id=settings.VAULT_ROLE_ID,
                secret_id=settings.VAULT_SECRET_ID,
                token=settings.VAULT_TOKEN,
                namespace=settings.VAULT_NAMESPACE,
                mount_point=run_config.get("vault_mount_point", settings.VAULT_MOUNT_POINT),
            )

        store: SecretStore = create_store(selected, vault_config)
        logger.info(f"Secret store resource initialized with backend: {selected}")
        try:
            yield store
        finally:
            store.close()

    return ResourceDefinition(
        resource_fn=create_resource,
        config_schema={
            "backend": Field(str, is_required=False, default_value=default_backend),
            "vault_addr": Field(str, is_required=False, default_value=settings.VAULT_ADDR),
            "vault_mount_point": Field(
                str, is_required=False, default_value=settings.VAULT_MOUNT_POINT
            ),
        },
        description="Secret store holding the shared and per-tenant secret scopes",
    )
