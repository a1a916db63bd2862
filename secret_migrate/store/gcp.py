"""Google Secret Manager backend.

A scope is a GCP project id. Labels map one-to-one onto Secret Manager
secret labels and payloads onto secret versions.
"""

import logging
from threading import Lock
from typing import Iterator, Optional

from google.api_core import exceptions as gcp_exceptions
from google.cloud import secretmanager

from secret_migrate.config import LATEST_VERSION, REPLICATION_AUTOMATIC
from secret_migrate.store.base import SecretStore
from secret_migrate.store.exceptions import (
    NotFoundError,
    SecretAlreadyExistsError,
    StoreAuthenticationError,
    StoreOperationError,
    TransientStoreError,
)
from secret_migrate.store.models import StoredSecret

logger = logging.getLogger(__name__)

_TRANSIENT_ERRORS = (
    gcp_exceptions.ServiceUnavailable,
    gcp_exceptions.DeadlineExceeded,
    gcp_exceptions.InternalServerError,
    gcp_exceptions.TooManyRequests,
    gcp_exceptions.ResourceExhausted,
    gcp_exceptions.Aborted,
    gcp_exceptions.RetryError,
)


def translate_gcp_error(
    error: gcp_exceptions.GoogleAPIError,
    operation: str,
    scope: str,
    secret_id: Optional[str] = None,
) -> StoreOperationError:
    """Map a google-api-core exception onto the store exception hierarchy."""
    details = {"cause": type(error).__name__}
    if isinstance(error, gcp_exceptions.AlreadyExists):
        return SecretAlreadyExistsError(scope, secret_id or "", details=details)
    # FailedPrecondition is what Secret Manager returns for disabled or destroyed versions
    if isinstance(error, (gcp_exceptions.NotFound, gcp_exceptions.FailedPrecondition)):
        return NotFoundError(operation, scope, secret_id, details=details)
    if isinstance(error, (gcp_exceptions.PermissionDenied, gcp_exceptions.Unauthenticated)):
        return StoreAuthenticationError(
            f"Access denied for '{operation}' on {scope}: {error}", scope, details
        )
    if isinstance(error, _TRANSIENT_ERRORS):
        return TransientStoreError(
            operation, scope, secret_id, f"Transient failure in '{operation}': {error}", details
        )
    return StoreOperationError(
        operation, scope, secret_id, f"Store operation '{operation}' failed: {error}", details
    )


class GoogleSecretManagerStore(SecretStore):
    """SecretStore backed by Google Cloud Secret Manager.

    Example:
        >>> store = GoogleSecretManagerStore()
        >>> for secret in store.list_secrets("my_project"):
        ...     print(secret.labels.get("display-name"))
    """

    def __init__(self, client: Optional[secretmanager.SecretManagerServiceClient] = None):
        """Initialize the store.

        Args:
            client: Pre-built client; one is created from application default
                credentials on first use when omitted.
        """
        self._client = client
        self._client_lock = Lock()

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Get or create the underlying Secret Manager client."""
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = secretmanager.SecretManagerServiceClient()
                    logger.info("Created Secret Manager client")
        return self._client

    @staticmethod
    def _project_path(project_id: str) -> str:
        return f"projects/{project_id}"

    @staticmethod
    def _secret_path(project_id: str, secret_id: str) -> str:
        return f"projects/{project_id}/secrets/{secret_id}"

    def list_secrets(self, scope: str) -> Iterator[StoredSecret]:
        try:
            pager = self.client.list_secrets(request={"parent": self._project_path(scope)})
            for secret in pager:
                yield StoredSecret(name=secret.name, labels=secret.labels)
        except gcp_exceptions.GoogleAPIError as e:
            raise translate_gcp_error(e, "list_secrets", scope) from e

    def create_secret(
        self,
        scope: str,
        secret_id: str,
        labels: dict[str, str],
        replication: str = REPLICATION_AUTOMATIC,
    ) -> None:
        if replication != REPLICATION_AUTOMATIC:
            raise ValueError(f"Unsupported replication policy: {replication}")

        try:
            self.client.create_secret(
                request={
                    "parent": self._project_path(scope),
                    "secret_id": secret_id,
                    "secret": {
                        "replication": {"automatic": {}},
                        "labels": dict(labels),
                    },
                }
            )
        except gcp_exceptions.GoogleAPIError as e:
            raise translate_gcp_error(e, "create_secret", scope, secret_id) from e
        logger.debug(f"Created secret {self._secret_path(scope, secret_id)}")

    def add_secret_version(self, scope: str, secret_id: str, payload: bytes) -> None:
        try:
            self.client.add_secret_version(
                request={
                    "parent": self._secret_path(scope, secret_id),
                    "payload": {"data": payload},
                }
            )
        except gcp_exceptions.GoogleAPIError as e:
            raise translate_gcp_error(e, "add_secret_version", scope, secret_id) from e

    def access_secret_version(
        self,
        scope: str,
        secret_id: str,
        version: str = LATEST_VERSION,
    ) -> bytes:
        name = f"{self._secret_path(scope, secret_id)}/versions/{version}"
        try:
            response = self.client.access_secret_version(request={"name": name})
        except gcp_exceptions.GoogleAPIError as e:
            raise translate_gcp_error(e, "access_secret_version", scope, secret_id) from e
        return response.payload.data

    def close(self) -> None:
        """Close the transport of the underlying client, if one was created."""
        if self._client is not None:
            transport = getattr(self._client, "transport", None)
            if transport is not None:
                transport.close()
            self._client = None
            logger.info("Secret Manager client closed")
