"""Application context management for the CLI."""

from dataclasses import dataclass
from typing import Any

from gluesync.cli.common.exits import exit_from_exc, usage_error
from gluesync.core.adapters.glue import GlueCatalogAdapter
from gluesync.core.adapters.snowflake import SnowflakeSourceAdapter
from gluesync.core.auth import (
    AuthError,
    SnowflakeSettings,
    get_client,
    get_snowflake_connection,
)


@dataclass
class GlueAppContext:
    """Application context holding the Glue client and catalog adapter."""

    profile: str | None
    region: str | None
    client: Any
    adapter: GlueCatalogAdapter


def build_glue_context(
    profile: str | None,
    region: str | None,
    catalog_id: str | None = None,
) -> GlueAppContext:
    """Build the Glue client and adapter, exiting with a message on auth errors."""
    try:
        client = get_client(profile, region)
    except AuthError as exc:
        exit_from_exc(exc, message=str(exc))
    adapter = GlueCatalogAdapter(client, catalog_id=catalog_id)
    return GlueAppContext(profile=profile, region=region, client=client, adapter=adapter)


def build_snowflake_source(
    *,
    account: str | None,
    user: str | None,
    password: str | None,
    warehouse: str | None,
    role: str | None,
) -> SnowflakeSourceAdapter:
    """Open the Snowflake connection used for source reads and stream clearing."""
    if not account or not user:
        usage_error(
            "Snowflake account and user are required "
            "(--sf-account/--sf-user or SNOWFLAKE_ACCOUNT/SNOWFLAKE_USER)."
        )
    settings = SnowflakeSettings(
        account=account,
        user=user,
        password=password,
        warehouse=warehouse,
        role=role,
    )
    try:
        connection = get_snowflake_connection(settings)
    except AuthError as exc:
        exit_from_exc(exc, message=str(exc))
    return SnowflakeSourceAdapter(connection)


@dataclass(frozen=True)
class GlueOptions:
    """Catalog connection options captured by a command group callback."""

    profile: str | None = None
    region: str | None = None
    catalog_id: str | None = None

    def build(self) -> GlueAppContext:
        """Build the Glue context on first use by a command."""
        return build_glue_context(self.profile, self.region, self.catalog_id)
