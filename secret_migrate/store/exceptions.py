"""Exceptions raised by secret store backends.

Backends translate their SDK errors into this hierarchy so the migration
layer handles Google Secret Manager and Vault failures the same way.
"""

from typing import Optional


class StoreError(Exception):
    """Base exception for secret store errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        """Initialize store error.

        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return error string representation."""
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class StoreOperationError(StoreError):
    """Raised when a list, create, read or write call against the store fails."""

    def __init__(
        self,
        operation: str,
        scope: str,
        secret_id: Optional[str] = None,
        message: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        target = f"{scope}/{secret_id}" if secret_id else scope
        full_message = message or f"Store operation '{operation}' failed for {target}"
        super().__init__(full_message, details)
        self.operation = operation
        self.scope = scope
        self.secret_id = secret_id


class NotFoundError(StoreOperationError):
    """Raised when a secret or secret version does not exist."""

    def __init__(
        self,
        operation: str,
        scope: str,
        secret_id: Optional[str] = None,
        message: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        full_message = message or f"Secret not found: {scope}/{secret_id}"
        super().__init__(operation, scope, secret_id, full_message, details)


class SecretAlreadyExistsError(StoreOperationError):
    """Raised when creating a secret whose identifier is already taken."""

    def __init__(
        self,
        scope: str,
        secret_id: str,
        message: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        full_message = message or f"Secret already exists: {scope}/{secret_id}"
        super().__init__("create_secret", scope, secret_id, full_message, details)


class TransientStoreError(StoreOperationError):
    """Raised for failures worth retrying (unavailable, deadline, throttling)."""


class StoreAuthenticationError(StoreOperationError):
    """Raised when the store rejects the configured credentials."""

    def __init__(
        self,
        message: str = "Secret store authentication failed",
        scope: str = "",
        details: Optional[dict] = None,
    ):
        super().__init__("authenticate", scope, None, message, details)
