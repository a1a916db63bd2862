"""Pydantic models shared by the secret store backends."""

from typing import Literal, Optional

from pydantic import BaseModel, Field, PositiveInt, field_validator


class StoredSecret(BaseModel):
    """Metadata the store returns for each listed secret."""

    name: str = Field(
        ...,
        description="Store-side identifier of the secret",
        examples=["projects/my_project/secrets/acme-api-key"],
    )
    labels: dict[str, str] = Field(
        default_factory=dict,
        description="Labels attached to the secret at the store level",
        examples=[{"display-name": "api-key", "tenant-name": "acme", "global": "false"}],
    )

    @field_validator("labels", mode="before")
    @classmethod
    def coerce_labels(cls, v) -> dict[str, str]:
        """Accept any mapping (protobuf maps included) and drop null values."""
        if v is None:
            return {}
        return {str(k): str(val) for k, val in dict(v).items() if val is not None}


class VaultConnectionConfig(BaseModel):
    """Where the Vault KV v2 store lives and how to log in to it.

    Only the credentials of the chosen ``auth_method`` are used; missing ones
    are reported when the store first authenticates.
    """

    vault_addr: str = Field(..., description="Vault URL", examples=["https://vault.example.com:8200"])
    auth_method: Literal["token", "approle", "kubernetes"] = "token"
    token: Optional[str] = None
    role_id: Optional[str] = Field(default=None, description="AppRole role id, or the Kubernetes auth role")
    secret_id: Optional[str] = None
    namespace: Optional[str] = None
    mount_point: str = Field(default="secret", description="KV v2 engine holding every scope")
    timeout: PositiveInt = 30
    verify: bool = True

    @field_validator("vault_addr")
    @classmethod
    def normalize_vault_addr(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("vault_addr must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("mount_point")
    @classmethod
    def normalize_mount_point(cls, v: str) -> str:
        mount = v.strip("/")
        if not mount:
            raise ValueError("mount_point must not be empty")
        return mount
