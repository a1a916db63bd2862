from dagster import Definitions

from .jobs.migration import tenant_secret_migration_job
from .resources import secret_store_resource

defs = Definitions(
    jobs=[tenant_secret_migration_job],
    resources={
        "secret_store": secret_store_resource(),
    },
)
