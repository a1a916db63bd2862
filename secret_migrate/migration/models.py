"""Credential records and migration results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from secret_migrate.migration.exceptions import LabelParseError, MissingTenantError

_TRUE_VALUES = frozenset({"true"})
_FALSE_VALUES = frozenset({"false"})


def parse_label_bool(labels: dict[str, str], key: str) -> Optional[bool]:
    """Parse a boolean label.

    Returns:
        True/False for a "true"/"false" value (case-insensitive), None when
        the label is absent. Choosing a default is left to the caller.

    Raises:
        LabelParseError: If the label is present with any other value.
    """
    if key not in labels:
        return None
    value = labels[key].strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise LabelParseError(key, labels[key])


def composite_secret_id(key: str, organization_id: Optional[str]) -> str:
    """Store-level identifier of a tenant credential: ``{organization_id}-{key}``."""
    if organization_id is None:
        raise MissingTenantError(key)
    return f"{organization_id}-{key}"


class Credential(BaseModel):
    """A tenant credential reconstructed from store labels and payload."""

    key: str = Field(..., description="Display-name label; the logical secret name")
    organization_id: Optional[str] = Field(
        default=None,
        description="Tenant label; None for non-tenant credentials",
    )
    value: str = Field(default="", description="Secret payload", repr=False)
    is_global: bool = Field(default=False, description="Shared across tenants; never migrated")
    labels: dict[str, str] = Field(
        default_factory=dict,
        description="Store labels, re-attached unchanged at the destination",
    )
    payload_missing: bool = Field(
        default=False,
        description="Payload read failed and value fell back to empty",
    )

    @property
    def secret_id(self) -> str:
        return composite_secret_id(self.key, self.organization_id)


class OutcomeStatus(str, Enum):
    """Per-credential migration outcome."""

    MIGRATED = "migrated"
    PLANNED = "planned"
    SKIPPED_GLOBAL = "skipped_global"
    SKIPPED_UNROUTABLE = "skipped_unroutable"
    FAILED = "failed"


@dataclass
class MigrationOutcome:
    """What happened to one credential."""
    key: str
    organization_id: Optional[str]
    status: OutcomeStatus
    destination: Optional[str] = None
    secret_id: Optional[str] = None
    reason: Optional[str] = None
    payload_missing: bool = False


@dataclass
class MigrationReport:
    """Ordered outcomes of one migration run."""
    source_scope: str = ""
    dry_run: bool = False
    outcomes: list[MigrationOutcome] = field(default_factory=list)

    def record(
        self,
        credential: Credential,
        status: OutcomeStatus,
        destination: Optional[str] = None,
        secret_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> MigrationOutcome:
        outcome = MigrationOutcome(
            key=credential.key,
            organization_id=credential.organization_id,
            status=status,
            destination=destination,
            secret_id=secret_id,
            reason=reason,
            payload_missing=credential.payload_missing,
        )
        self.outcomes.append(outcome)
        return outcome

    def with_status(self, status: OutcomeStatus) -> list[MigrationOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def migrated(self) -> list[MigrationOutcome]:
        return self.with_status(OutcomeStatus.MIGRATED)

    @property
    def failed(self) -> list[MigrationOutcome]:
        return self.with_status(OutcomeStatus.FAILED)

    @property
    def skipped(self) -> list[MigrationOutcome]:
        return [
            o for o in self.outcomes
            if o.status in (OutcomeStatus.SKIPPED_GLOBAL, OutcomeStatus.SKIPPED_UNROUTABLE)
        ]

    @property
    def shell_credentials(self) -> list[MigrationOutcome]:
        """Outcomes for credentials whose payload could not be read at discovery."""
        return [o for o in self.outcomes if o.payload_missing]

    @property
    def success(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict[str, Any]:
        """Convert report to dictionary for JSON serialization."""
        return {
            "summary": {
                "source_scope": self.source_scope,
                "dry_run": self.dry_run,
                "total": len(self.outcomes),
                **{status.value: len(self.with_status(status)) for status in OutcomeStatus},
                "shell_credentials": len(self.shell_credentials),
            },
            "outcomes": [
                {
                    "key": o.key,
                    "organization_id": o.organization_id,
                    "status": o.status.value,
                    "destination": o.destination,
                    "secret_id": o.secret_id,
                    "reason": o.reason,
                    "payload_missing": o.payload_missing,
                }
                for o in self.outcomes
            ],
        }
