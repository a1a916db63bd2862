"""Migration of tenant credentials from a shared scope into per-tenant scopes.

Discovery finds labelled tenant secrets, the destination resolver maps each
organization to its destination scope, and the engine copies credentials
across while refusing duplicates.
"""

from secret_migrate.migration.destinations import DestinationResolver, OrgDestinationMap
from secret_migrate.migration.discover import CredentialDiscoverer
from secret_migrate.migration.engine import MigrationEngine
from secret_migrate.migration.exceptions import (
    DuplicateCredentialError,
    LabelParseError,
    MappingFormatError,
    MigrationError,
    MissingTenantError,
    UnroutableCredentialError,
)
from secret_migrate.migration.models import (
    Credential,
    MigrationOutcome,
    MigrationReport,
    OutcomeStatus,
    composite_secret_id,
    parse_label_bool,
)

__all__ = [
    "CredentialDiscoverer",
    "DestinationResolver",
    "OrgDestinationMap",
    "MigrationEngine",
    "Credential",
    "MigrationOutcome",
    "MigrationReport",
    "OutcomeStatus",
    "composite_secret_id",
    "parse_label_bool",
    "MigrationError",
    "MissingTenantError",
    "LabelParseError",
    "MappingFormatError",
    "UnroutableCredentialError",
    "DuplicateCredentialError",
]
