"""Tests for the Dagster migration job and the secret store resource."""

from unittest.mock import patch

import pytest
from dagster import DagsterInstance, build_init_resource_context, mem_io_manager

from secret_migrate.definitions import defs
from secret_migrate.jobs.migration import tenant_secret_migration_job
from secret_migrate.migration import OutcomeStatus
from secret_migrate.resources import secret_store_resource

SOURCE = "shared"


def run_config(mapping_path, dry_run=False):
    return {
        "ops": {
            "discover_credentials": {"config": {"source_scope": SOURCE}},
            "load_destination_map": {"config": {"mapping_path": mapping_path}},
            "migrate_credentials": {"config": {"source_scope": SOURCE, "dry_run": dry_run}},
        }
    }


@pytest.fixture
def seeded_store(store, tenant_labels):
    store.seed(SOURCE, "acme-api-key", tenant_labels("api-key"), payload="xyz")
    store.seed(SOURCE, "acme-shared", tenant_labels("shared", is_global="true"), payload="g")
    return store


class TestTenantSecretMigrationJob:
    """Test the job end to end against an in-memory store."""

    def test_migrates_credentials(self, seeded_store, mapping_csv):
        result = tenant_secret_migration_job.execute_in_process(
            run_config=run_config(mapping_csv("acme,proj-1\n")),
            resources={"secret_store": seeded_store},
        )

        assert result.success
        report = result.output_for_node("migrate_credentials")
        assert [o.status for o in report.outcomes] == [
            OutcomeStatus.MIGRATED,
            OutcomeStatus.SKIPPED_GLOBAL,
        ]
        assert seeded_store.payload("proj-1", "acme-api-key") == "xyz"

    def test_dry_run(self, seeded_store, mapping_csv):
        result = tenant_secret_migration_job.execute_in_process(
            run_config=run_config(mapping_csv("acme,proj-1\n"), dry_run=True),
            resources={"secret_store": seeded_store},
        )

        assert result.success
        assert seeded_store.created == []

    def test_duplicate_fails_run(self, seeded_store, mapping_csv, tenant_labels):
        seeded_store.seed("proj-1", "acme-api-key", tenant_labels("api-key"), payload="old")

        result = tenant_secret_migration_job.execute_in_process(
            run_config=run_config(mapping_csv("acme,proj-1\n")),
            resources={"secret_store": seeded_store},
            raise_on_error=False,
        )

        assert not result.success
        assert seeded_store.payload("proj-1", "acme-api-key") == "old"

    def test_malformed_mapping_fails_run(self, seeded_store, mapping_csv):
        result = tenant_secret_migration_job.execute_in_process(
            run_config=run_config(mapping_csv("acme\n")),
            resources={"secret_store": seeded_store},
            raise_on_error=False,
        )

        assert not result.success
        assert seeded_store.created == []


class TestIntermediateStorage:
    """Test that op outputs holding payloads never leave process memory."""

    def test_job_uses_in_memory_io_manager(self):
        io_manager_def = tenant_secret_migration_job.resource_defs["io_manager"]
        assert io_manager_def.resource_fn is mem_io_manager.resource_fn

    def test_definitions_keep_in_memory_io_manager(self):
        job_def = defs.get_job_def("tenant_secret_migration_job")
        io_manager_def = job_def.resource_defs["io_manager"]
        assert io_manager_def.resource_fn is mem_io_manager.resource_fn

    def test_run_writes_nothing_under_dagster_home(self, seeded_store, mapping_csv, tmp_path, monkeypatch):
        dagster_home = tmp_path / "dagster_home"
        dagster_home.mkdir()
        monkeypatch.setenv("DAGSTER_HOME", str(dagster_home))
        seeded_store.seed(SOURCE, "acme-token", {"display-name": "token", "tenant-name": "acme"}, payload="TOPSECRET")

        with DagsterInstance.get() as instance:
            result = tenant_secret_migration_job.execute_in_process(
                run_config=run_config(mapping_csv("acme,proj-1\n")),
                resources={"secret_store": seeded_store},
                instance=instance,
            )

        assert result.success
        for path in dagster_home.rglob("*"):
            if path.is_file():
                assert b"TOPSECRET" not in path.read_bytes()


class TestSecretStoreResource:
    """Test the secret_store resource factory."""

    def test_yields_and_closes_store(self, make_store):
        in_memory = make_store()
        with patch("secret_migrate.resources.create_store", return_value=in_memory) as factory:
            context = build_init_resource_context(config={"backend": "gcp"})
            with secret_store_resource()(context) as store:
                assert store is in_memory

        factory.assert_called_once_with("gcp", None)
        assert in_memory.closed is True

    def test_vault_backend_uses_run_config(self, make_store):
        with patch("secret_migrate.resources.create_store", return_value=make_store()) as factory:
            context = build_init_resource_context(
                config={
                    "backend": "vault",
                    "vault_addr": "https://vault.example.com:8200",
                    "vault_mount_point": "tenants",
                }
            )
            with secret_store_resource()(context):
                pass

        backend, vault_config = factory.call_args.args
        assert backend == "vault"
        assert vault_config.vault_addr == "https://vault.example.com:8200"
        assert vault_config.mount_point == "tenants"
