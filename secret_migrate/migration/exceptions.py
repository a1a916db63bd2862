"""Exceptions raised by credential discovery, mapping load and migration."""

from typing import Optional


class MigrationError(Exception):
    """Base exception for migration errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return error string representation."""
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class MissingTenantError(MigrationError):
    """Raised when a credential has no tenant, so its composite id cannot be formed."""

    def __init__(self, key: str, message: Optional[str] = None):
        super().__init__(message or f"Tenant name cannot be null for secret key '{key}'")
        self.key = key


class LabelParseError(MigrationError):
    """Raised when a label value is not a recognisable boolean."""

    def __init__(self, label: str, value: str):
        super().__init__(f"Label '{label}' has non-boolean value '{value}'")
        self.label = label
        self.value = value


class MappingFormatError(MigrationError):
    """Raised when a row of the org-to-destination mapping is malformed."""

    def __init__(self, line_number: int, row: list, reason: str):
        super().__init__(
            f"Malformed mapping row at line {line_number}: {reason}",
            details={"row": row},
        )
        self.line_number = line_number
        self.row = row


class UnroutableCredentialError(MigrationError):
    """Raised when no destination is mapped for a credential's organization."""

    def __init__(self, key: str, organization_id: Optional[str]):
        super().__init__(
            f"Cannot find a destination for organization '{organization_id}' (key '{key}')"
        )
        self.key = key
        self.organization_id = organization_id


class DuplicateCredentialError(MigrationError):
    """Raised when the destination already holds a secret with the same key and tenant."""

    def __init__(self, key: str, organization_id: str, destination: str, existing_name: str):
        super().__init__(
            f"Key with duplicate labels already exists in '{destination}'",
            details={
                "key": key,
                "organization_id": organization_id,
                "existing": existing_name,
            },
        )
        self.key = key
        self.organization_id = organization_id
        self.destination = destination
        self.existing_name = existing_name
