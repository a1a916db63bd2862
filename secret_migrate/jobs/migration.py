from dagster import Field, OpExecutionContext, job, mem_io_manager, op

from secret_migrate import config as settings
from secret_migrate.migration.destinations import DestinationResolver, OrgDestinationMap
from secret_migrate.migration.discover import CredentialDiscoverer
from secret_migrate.migration.engine import MigrationEngine
from secret_migrate.migration.models import MigrationReport

SOURCE_SCOPE_CONFIG = Field(
    str,
    default_value=settings.SOURCE_PROJECT_ID,
    description="Scope holding the shared secrets",
)


@op(
    required_resource_keys={"secret_store"},
    config_schema={"source_scope": SOURCE_SCOPE_CONFIG},
    description="List the source scope and rebuild tenant credentials",
)
def discover_credentials(context: OpExecutionContext) -> list:
    source_scope = context.op_config["source_scope"]
    credentials = CredentialDiscoverer(context.resources.secret_store).discover(source_scope)
    context.log.info(f"Discovered {len(credentials)} credentials in {source_scope}")
    return credentials


@op(
    config_schema={
        "mapping_path": Field(
            str,
            default_value=settings.MAPPING_CSV_PATH,
            description="CSV of organization,destination rows",
        )
    },
    description="Load the organization to destination mapping",
)
def load_destination_map(context: OpExecutionContext) -> OrgDestinationMap:
    mapping = DestinationResolver().load(context.op_config["mapping_path"])
    context.log.info(f"Loaded {len(mapping)} organization mappings")
    return mapping


@op(
    required_resource_keys={"secret_store"},
    config_schema={
        "source_scope": SOURCE_SCOPE_CONFIG,
        "dry_run": Field(bool, default_value=False, description="Plan without writing"),
    },
    description="Copy eligible credentials to their destinations",
)
def migrate_credentials(
    context: OpExecutionContext,
    credentials: list,
    destination_map: OrgDestinationMap,
) -> MigrationReport:
    engine = MigrationEngine(
        context.resources.secret_store,
        dry_run=context.op_config["dry_run"],
    )
    report = engine.migrate(credentials, destination_map, context.op_config["source_scope"])
    context.log.info(
        f"Migrated {len(report.migrated)} credentials, skipped {len(report.skipped)}"
    )
    return report


# Op outputs carry plaintext payloads; keep them in process memory only
@job(
    resource_defs={"io_manager": mem_io_manager},
    description="Move tenant credentials from the shared scope into per-tenant scopes",
)
def tenant_secret_migration_job():
    migrate_credentials(discover_credentials(), load_destination_map())
