"""Migration engine: copies tenant credentials into their destination scopes.

Credentials are processed one at a time in input order. Global and
unroutable credentials are skipped. A duplicate at the destination, or any
store failure while checking or copying, stops the run: the error is
logged, recorded in the report and re-raised.

The duplicate check and the create are separate store calls, so two runs
against the same destination must not overlap.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Optional

from secret_migrate.config import (
    LABEL_KEY_DISPLAY_NAME,
    LABEL_KEY_TENANT,
    REPLICATION_AUTOMATIC,
)
from secret_migrate.migration.destinations import DestinationResolver
from secret_migrate.migration.discover import list_all_secrets
from secret_migrate.migration.exceptions import (
    DuplicateCredentialError,
    UnroutableCredentialError,
)
from secret_migrate.migration.models import Credential, MigrationReport, OutcomeStatus
from secret_migrate.store.base import SecretStore

logger = logging.getLogger(__name__)


class MigrationEngine:
    """Moves non-global tenant credentials to their mapped destinations."""

    def __init__(
        self,
        store: SecretStore,
        resolver: Optional[DestinationResolver] = None,
        dry_run: bool = False,
    ):
        """Initialize the engine.

        Args:
            store: Store holding both the source and the destination scopes.
            resolver: Destination lookup; a default DestinationResolver when omitted.
            dry_run: Check and plan every copy without writing anything.
        """
        self.store = store
        self.resolver = resolver or DestinationResolver()
        self.dry_run = dry_run
        self.report: Optional[MigrationReport] = None
        self._planned: set[tuple[str, str, Optional[str]]] = set()

    def migrate(
        self,
        credentials: Iterable[Credential],
        destination_map: Mapping,
        source_scope: str,
    ) -> MigrationReport:
        """Migrate every eligible credential.

        The report of the current run is kept on ``self.report`` so it is
        still available when a failure aborts the run.

        Returns:
            MigrationReport with one outcome per processed credential.

        Raises:
            DuplicateCredentialError: If a destination already holds the credential.
            StoreOperationError: If a list, create or write call fails.
        """
        self.report = MigrationReport(source_scope=source_scope, dry_run=self.dry_run)
        self._planned = set()

        for credential in credentials:
            if credential.is_global:
                logger.debug(f"Skipping global secret key {credential.key}")
                self.report.record(credential, OutcomeStatus.SKIPPED_GLOBAL)
                continue

            try:
                destination = self._route(credential, destination_map)
            except UnroutableCredentialError as e:
                logger.warning(str(e))
                self.report.record(credential, OutcomeStatus.SKIPPED_UNROUTABLE, reason=str(e))
                continue

            try:
                self._move(credential, destination)
            except Exception as e:
                logger.error(
                    f"Failed to migrate secret key {credential.key} "
                    f"(organization {credential.organization_id}) to {destination}: {e}"
                )
                self.report.record(
                    credential,
                    OutcomeStatus.FAILED,
                    destination=destination,
                    reason=f"{type(e).__name__}: {e}",
                )
                raise

        logger.info(
            f"Migration from {source_scope} finished: "
            f"{len(self.report.migrated)} migrated, "
            f"{len(self.report.with_status(OutcomeStatus.PLANNED))} planned, "
            f"{len(self.report.skipped)} skipped"
        )
        return self.report

    def _route(self, credential: Credential, destination_map: Mapping) -> str:
        destination = self.resolver.resolve(destination_map, credential.organization_id)
        if destination is None:
            raise UnroutableCredentialError(credential.key, credential.organization_id)
        return destination

    def find_duplicate(self, credential: Credential, destination: str) -> Optional[str]:
        """Name of a destination secret with the same display name and tenant, if any."""
        for existing in list_all_secrets(self.store, destination):
            if (
                existing.labels.get(LABEL_KEY_DISPLAY_NAME) == credential.key
                and existing.labels.get(LABEL_KEY_TENANT) == credential.organization_id
            ):
                return existing.name
        return None

    def _move(self, credential: Credential, destination: str) -> None:
        existing = self.find_duplicate(credential, destination)
        if existing is not None:
            raise DuplicateCredentialError(
                credential.key, credential.organization_id, destination, existing
            )

        secret_id = credential.secret_id

        if self.dry_run:
            # Planned copies count as existing destination secrets
            planned = (destination, credential.key, credential.organization_id)
            if planned in self._planned:
                raise DuplicateCredentialError(
                    credential.key, credential.organization_id, destination, secret_id
                )
            self._planned.add(planned)
            logger.info(f"[DRY RUN] Would migrate {secret_id} to {destination}")
            self.report.record(
                credential, OutcomeStatus.PLANNED, destination=destination, secret_id=secret_id
            )
            return

        self.store.create_secret(
            destination,
            secret_id,
            credential.labels,
            replication=REPLICATION_AUTOMATIC,
        )
        self.store.add_secret_version(destination, secret_id, credential.value.encode("utf-8"))

        logger.info(f"Successfully migrated secret {secret_id} to {destination}")
        self.report.record(
            credential, OutcomeStatus.MIGRATED, destination=destination, secret_id=secret_id
        )
