"""Tests for the Vault KV v2 backend."""

from unittest.mock import MagicMock, patch

import pytest
import requests
from hvac.exceptions import Forbidden, InvalidPath, VaultDown

from secret_migrate.store.exceptions import (
    NotFoundError,
    SecretAlreadyExistsError,
    StoreAuthenticationError,
    StoreOperationError,
    TransientStoreError,
)
from secret_migrate.store.models import VaultConnectionConfig
from secret_migrate.store.vault import VaultKVStore, translate_vault_error


@pytest.fixture
def vault_config():
    return VaultConnectionConfig(
        vault_addr="https://vault.example.com:8200/",
        auth_method="token",
        token="s.test",
        mount_point="tenants",
    )


@pytest.fixture
def hvac_client():
    return MagicMock()


@pytest.fixture
def kv(hvac_client):
    return hvac_client.secrets.kv.v2


@pytest.fixture
def vault_store(vault_config, hvac_client):
    return VaultKVStore(vault_config, client=hvac_client)


class TestVaultConnectionConfig:
    """Test connection settings validation."""

    def test_trailing_slash_stripped(self, vault_config):
        assert vault_config.vault_addr == "https://vault.example.com:8200"

    def test_invalid_address(self):
        with pytest.raises(ValueError):
            VaultConnectionConfig(vault_addr="vault.example.com")

    def test_invalid_auth_method(self):
        with pytest.raises(ValueError):
            VaultConnectionConfig(vault_addr="http://localhost:8200", auth_method="ldap")

    def test_mount_point_slashes_stripped(self):
        config = VaultConnectionConfig(vault_addr="http://localhost:8200", mount_point="/tenants/")
        assert config.mount_point == "tenants"

    @pytest.mark.parametrize("mount_point", ["", "/"])
    def test_empty_mount_point(self, mount_point):
        with pytest.raises(ValueError):
            VaultConnectionConfig(vault_addr="http://localhost:8200", mount_point=mount_point)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValueError):
            VaultConnectionConfig(vault_addr="http://localhost:8200", timeout=0)


class TestTranslateVaultError:
    """Test mapping of hvac errors."""

    @pytest.mark.parametrize(
        "error,expected",
        [
            (InvalidPath("missing"), NotFoundError),
            (Forbidden("denied"), StoreAuthenticationError),
            (VaultDown("sealed"), TransientStoreError),
            (requests.ConnectionError("refused"), TransientStoreError),
            (ValueError("other"), StoreOperationError),
        ],
    )
    def test_mapping(self, error, expected):
        assert type(translate_vault_error(error, "list_secrets", "shared")) is expected


class TestAuthentication:
    """Test client construction and login."""

    def test_token_auth(self, vault_config):
        with patch("secret_migrate.store.vault.hvac.Client") as client_cls:
            store = VaultKVStore(vault_config)
            client = store.client

        client_cls.assert_called_once_with(
            url="https://vault.example.com:8200",
            verify=True,
            timeout=30,
            namespace=None,
        )
        assert client.token == "s.test"

    def test_approle_auth(self):
        config = VaultConnectionConfig(
            vault_addr="http://localhost:8200",
            auth_method="approle",
            role_id="role",
            secret_id="secret",
        )
        with patch("secret_migrate.store.vault.hvac.Client") as client_cls:
            client_cls.return_value.auth.approle.login.return_value = {
                "auth": {"client_token": "s.approle"}
            }
            client = VaultKVStore(config).client

        assert client.token == "s.approle"

    def test_approle_requires_ids(self):
        config = VaultConnectionConfig(vault_addr="http://localhost:8200", auth_method="approle")
        with patch("secret_migrate.store.vault.hvac.Client"):
            with pytest.raises(StoreAuthenticationError):
                VaultKVStore(config).client

    def test_token_required(self):
        config = VaultConnectionConfig(vault_addr="http://localhost:8200")
        with patch("secret_migrate.store.vault.hvac.Client"):
            with pytest.raises(StoreAuthenticationError):
                VaultKVStore(config).client


class TestVaultKVStore:
    """Test KV v2 calls made by the store."""

    def test_list_secrets_reads_labels_from_metadata(self, vault_store, kv):
        kv.list_secrets.return_value = {"data": {"keys": ["acme-k", "nested/"]}}
        kv.read_secret_metadata.return_value = {
            "data": {"custom_metadata": {"display-name": "k", "tenant-name": "acme"}}
        }

        secrets = list(vault_store.list_secrets("shared"))

        kv.list_secrets.assert_called_once_with(path="shared", mount_point="tenants")
        kv.read_secret_metadata.assert_called_once_with(path="shared/acme-k", mount_point="tenants")
        assert [s.name for s in secrets] == ["shared/acme-k"]
        assert secrets[0].labels == {"display-name": "k", "tenant-name": "acme"}

    def test_list_missing_scope_is_empty(self, vault_store, kv):
        kv.list_secrets.side_effect = InvalidPath("no such path")

        assert list(vault_store.list_secrets("proj-1")) == []

    def test_list_without_custom_metadata(self, vault_store, kv):
        kv.list_secrets.return_value = {"data": {"keys": ["plain"]}}
        kv.read_secret_metadata.return_value = {"data": {"custom_metadata": None}}

        assert list(vault_store.list_secrets("shared"))[0].labels == {}

    def test_list_failure_is_translated(self, vault_store, kv):
        kv.list_secrets.side_effect = VaultDown("sealed")

        with pytest.raises(TransientStoreError):
            list(vault_store.list_secrets("shared"))

    def test_create_secret_writes_metadata(self, vault_store, kv):
        kv.read_secret_metadata.side_effect = InvalidPath("absent")

        vault_store.create_secret("proj-1", "acme-k", {"display-name": "k"})

        kv.update_metadata.assert_called_once_with(
            path="proj-1/acme-k",
            custom_metadata={"display-name": "k"},
            mount_point="tenants",
        )

    def test_create_existing_secret(self, vault_store, kv):
        kv.read_secret_metadata.return_value = {"data": {"custom_metadata": {}}}

        with pytest.raises(SecretAlreadyExistsError):
            vault_store.create_secret("proj-1", "acme-k", {})
        kv.update_metadata.assert_not_called()

    def test_add_secret_version(self, vault_store, kv):
        vault_store.add_secret_version("proj-1", "acme-k", b"xyz")

        kv.create_or_update_secret.assert_called_once_with(
            path="proj-1/acme-k",
            secret={"value": "xyz"},
            mount_point="tenants",
        )

    def test_access_latest_version(self, vault_store, kv):
        kv.read_secret_version.return_value = {"data": {"data": {"value": "xyz"}}}

        assert vault_store.access_secret_version("shared", "acme-k") == b"xyz"
        kv.read_secret_version.assert_called_once_with(
            path="shared/acme-k",
            version=None,
            mount_point="tenants",
            raise_on_deleted_version=True,
        )

    def test_access_numbered_version(self, vault_store, kv):
        kv.read_secret_version.return_value = {"data": {"data": {"value": "old"}}}

        vault_store.access_secret_version("shared", "acme-k", version="2")

        assert kv.read_secret_version.call_args.kwargs["version"] == 2

    def test_access_without_value_field(self, vault_store, kv):
        kv.read_secret_version.return_value = {"data": {"data": {"other": "x"}}}

        with pytest.raises(NotFoundError):
            vault_store.access_secret_version("shared", "acme-k")

    def test_access_missing_secret(self, vault_store, kv):
        kv.read_secret_version.side_effect = InvalidPath("absent")

        with pytest.raises(NotFoundError):
            vault_store.access_secret_version("shared", "acme-k")

    def test_close(self, vault_store, hvac_client):
        vault_store.close()

        hvac_client.adapter.close.assert_called_once()
        assert vault_store._client is None
