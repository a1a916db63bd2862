"""Migration orchestrator for moving tenant secrets out of a shared scope.

Runs the whole migration once:
1. Discover labelled tenant credentials in the source scope
2. Load the organization -> destination CSV mapping
3. Copy every non-global, routable credential to its destination
4. Optionally read each migrated secret back and compare payloads

Usage:
    python -m secret_migrate.migration.migrate --source-project my_project --mapping orgs.csv

Example:
    # Preview which secrets would move
    python -m secret_migrate.migration.migrate --dry-run

    # Migrate on Vault and keep a JSON report
    python -m secret_migrate.migration.migrate --backend vault --report-output report.json
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from secret_migrate import config as settings
from secret_migrate.migration.destinations import DestinationResolver, OrgDestinationMap
from secret_migrate.migration.discover import CredentialDiscoverer
from secret_migrate.migration.engine import MigrationEngine
from secret_migrate.migration.exceptions import MigrationError
from secret_migrate.migration.models import Credential, MigrationReport
from secret_migrate.store import BACKENDS, SecretStore, create_store
from secret_migrate.store.exceptions import StoreError

logger = logging.getLogger(__name__)


@dataclass
class MigrationConfig:
    """Parameters of one migration run."""
    source_scope: str = settings.SOURCE_PROJECT_ID
    mapping_path: str = settings.MAPPING_CSV_PATH
    backend: str = settings.SECRET_STORE_BACKEND
    dry_run: bool = False
    verify: bool = False
    report_output: Optional[str] = None


class MigrationOrchestrator:
    """Runs discovery, mapping load and migration against one store."""

    def __init__(self, store: SecretStore, config: MigrationConfig):
        """Initialize the migration orchestrator.

        Args:
            store: Store holding the source and destination scopes.
            config: Migration configuration.
        """
        self.store = store
        self.config = config
        self.discoverer = CredentialDiscoverer(store)
        self.resolver = DestinationResolver()
        self.engine = MigrationEngine(store, self.resolver, dry_run=config.dry_run)
        self.credentials: list[Credential] = []
        self.destination_map: Optional[OrgDestinationMap] = None

    @property
    def report(self) -> Optional[MigrationReport]:
        """Report of the last run, partial if the run was aborted."""
        return self.engine.report

    def run(self) -> MigrationReport:
        """Discover, load the mapping and migrate.

        Raises:
            StoreError: If listing the source fails, or a copy fails.
            MigrationError: If the mapping is malformed or a duplicate is found.
        """
        self.credentials = self.discoverer.discover(self.config.source_scope)
        self.destination_map = self.resolver.load(self.config.mapping_path)
        return self.engine.migrate(
            self.credentials, self.destination_map, self.config.source_scope
        )

    def verify(self) -> list[str]:
        """Read every migrated secret back from its destination.

        Returns:
            Secret ids whose destination payload differs from the source.

        Raises:
            NotFoundError: If a migrated secret cannot be read back.
        """
        if self.report is None:
            return []

        source_values = {(c.key, c.organization_id): c.value for c in self.credentials}
        mismatched = []
        for outcome in self.report.migrated:
            copied = self.discoverer.get(outcome.destination, outcome.key, outcome.organization_id)
            if copied.value != source_values.get((outcome.key, outcome.organization_id)):
                logger.error(f"Payload mismatch for {outcome.secret_id} in {outcome.destination}")
                mismatched.append(outcome.secret_id)
        return mismatched


def write_report(report: MigrationReport, path: str) -> Path:
    """Save the report as JSON and return the file path."""
    output = Path(path)
    with open(output, 'w') as f:
        json.dump(report.to_dict(), f, indent=2)
    return output


def print_summary(report: MigrationReport) -> None:
    """Print per-status counts and every non-migrated outcome."""
    summary = report.to_dict()["summary"]

    print("\n" + "#" * 60)
    print("# MIGRATION SUMMARY")
    print("#" * 60)
    if report.dry_run:
        print("\n[DRY RUN MODE - No changes were made]")
    print(f"\n  Source scope: {report.source_scope}")
    print(f"  Credentials processed: {summary['total']}")
    print(f"  Migrated: {summary['migrated']}")
    print(f"  Planned (dry run): {summary['planned']}")
    print(f"  Skipped (global): {summary['skipped_global']}")
    print(f"  Skipped (no destination): {summary['skipped_unroutable']}")
    print(f"  Failed: {summary['failed']}")
    print(f"  Without readable payload: {summary['shell_credentials']}")

    for outcome in report.outcomes:
        if outcome.reason:
            print(f"  - {outcome.key} ({outcome.organization_id}): {outcome.status.value}: {outcome.reason}")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the migration orchestrator."""
    parser = argparse.ArgumentParser(
        description="Migrate tenant secrets from a shared scope into per-tenant scopes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Dry run against Google Secret Manager
    python -m secret_migrate.migration.migrate --source-project my_project --dry-run

    # Migrate and verify every copied payload
    python -m secret_migrate.migration.migrate --mapping orgs.csv --verify
        """
    )

    parser.add_argument(
        "--source-project", "-s",
        default=settings.SOURCE_PROJECT_ID,
        help=f"Scope holding the shared secrets (default: {settings.SOURCE_PROJECT_ID})"
    )
    parser.add_argument(
        "--mapping", "-m",
        default=settings.MAPPING_CSV_PATH,
        help="CSV file of organization,destination rows (default: bundled sample.csv)"
    )
    parser.add_argument(
        "--backend", "-b",
        default=settings.SECRET_STORE_BACKEND,
        choices=list(BACKENDS),
        help=f"Secret store backend (default: {settings.SECRET_STORE_BACKEND})"
    )
    parser.add_argument(
        "--dry-run", "-n",
        action="store_true",
        help="Check and plan every copy without writing"
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Read migrated secrets back and compare payloads"
    )
    parser.add_argument(
        "--report-output", "-o",
        default=None,
        help="Write the migration report to this JSON file"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args(argv)

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    config = MigrationConfig(
        source_scope=args.source_project,
        mapping_path=args.mapping,
        backend=args.backend,
        dry_run=args.dry_run,
        verify=args.verify,
        report_output=args.report_output,
    )

    exit_code = 0
    orchestrator = None
    try:
        with create_store(config.backend) as store:
            orchestrator = MigrationOrchestrator(store, config)
            orchestrator.run()
            if config.verify and not config.dry_run:
                mismatched = orchestrator.verify()
                if mismatched:
                    print(f"\nVerification failed for: {', '.join(mismatched)}")
                    exit_code = 1
    except (MigrationError, StoreError) as e:
        logger.error(f"Migration aborted: {e}")
        exit_code = 1
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        exit_code = 130
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        exit_code = 1

    if orchestrator is not None and orchestrator.report is not None:
        print_summary(orchestrator.report)
        if config.report_output:
            output = write_report(orchestrator.report, config.report_output)
            print(f"\nReport saved to: {output}")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
