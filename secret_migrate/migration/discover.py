"""Discovery of tenant credentials in the shared source store.

Discovery is best-effort: a secret that cannot be converted is logged and
dropped, and the rest of the pass continues. A secret whose payload cannot
be read is still returned, with an empty value and ``payload_missing`` set.
"""

import logging

from secret_migrate.config import (
    LABEL_KEY_DISPLAY_NAME,
    LABEL_KEY_GLOBAL,
    LABEL_KEY_TENANT,
    LATEST_VERSION,
)
from secret_migrate.migration.exceptions import LabelParseError, MissingTenantError
from secret_migrate.migration.models import Credential, composite_secret_id, parse_label_bool
from secret_migrate.retry import with_store_retry
from secret_migrate.store.base import SecretStore
from secret_migrate.store.exceptions import StoreOperationError
from secret_migrate.store.models import StoredSecret

logger = logging.getLogger(__name__)


@with_store_retry()
def list_all_secrets(store: SecretStore, scope: str) -> list[StoredSecret]:
    """Drain the store's lazy listing of ``scope`` into a list.

    A transient failure restarts the listing from the first page.
    """
    return list(store.list_secrets(scope))


@with_store_retry()
def read_payload(store: SecretStore, scope: str, secret_id: str) -> str:
    """Read the latest version of a secret as UTF-8 text."""
    return store.access_secret_version(scope, secret_id, LATEST_VERSION).decode("utf-8")


class CredentialDiscoverer:
    """Finds labelled tenant credentials in a scope and loads their payloads."""

    def __init__(self, store: SecretStore):
        self.store = store

    def discover(self, source_scope: str) -> list[Credential]:
        """List every secret in ``source_scope`` and rebuild tenant credentials.

        Args:
            source_scope: Scope holding the shared secrets.

        Returns:
            Credentials in listing order.

        Raises:
            StoreOperationError: If the listing itself fails.
        """
        secrets = list_all_secrets(self.store, source_scope)
        logger.info(f"Listed {len(secrets)} secrets in {source_scope}")

        credentials: list[Credential] = []
        for secret in secrets:
            if LABEL_KEY_DISPLAY_NAME not in secret.labels:
                continue
            try:
                credentials.append(self._to_credential(source_scope, secret))
            except MissingTenantError as e:
                logger.error(f"Dropping secret {secret.name}: {e}")
            except Exception as e:
                logger.error(
                    f"Failed to convert secret {secret.name} to a credential: "
                    f"{type(e).__name__}: {e}"
                )

        shells = sum(1 for c in credentials if c.payload_missing)
        logger.info(
            f"Discovered {len(credentials)} credentials in {source_scope} "
            f"({shells} without a readable payload)"
        )
        return credentials

    def get(self, scope: str, key: str, organization_id: str) -> Credential:
        """Fetch one credential by key and tenant.

        Raises:
            MissingTenantError: If ``organization_id`` is None.
            NotFoundError: If the secret or its latest version does not exist.
        """
        secret_id = composite_secret_id(key, organization_id)
        value = read_payload(self.store, scope, secret_id)
        return Credential(key=key, organization_id=organization_id, value=value)

    def _to_credential(self, scope: str, secret: StoredSecret) -> Credential:
        labels = secret.labels
        key = labels[LABEL_KEY_DISPLAY_NAME]
        organization_id = labels.get(LABEL_KEY_TENANT)
        is_global = self._parse_global(secret)

        secret_id = composite_secret_id(key, organization_id)
        try:
            value = read_payload(self.store, scope, secret_id)
            payload_missing = False
        except StoreOperationError as e:
            logger.warning(
                f"No readable payload for {scope}/{secret_id}; "
                f"discovering it as an empty shell credential: {e}"
            )
            value = ""
            payload_missing = True

        return Credential(
            key=key,
            organization_id=organization_id,
            value=value,
            is_global=is_global,
            labels=dict(labels),
            payload_missing=payload_missing,
        )

    @staticmethod
    def _parse_global(secret: StoredSecret) -> bool:
        try:
            parsed = parse_label_bool(secret.labels, LABEL_KEY_GLOBAL)
        except LabelParseError as e:
            # Defaulting to non-global lets the secret migrate; flagged for review
            logger.warning(f"{e} on {secret.name}; treating it as non-global, review before re-running")
            return False
        return bool(parsed)
