"""Common CLI options for the CLI."""

from pathlib import Path

import typer

ProfileOpt = typer.Option(
    None,
    "--profile",
    "-p",
    envvar="AWS_PROFILE",
    help="AWS named profile (from ~/.aws/config)",
)

RegionOpt = typer.Option(
    None,
    "--region",
    envvar="AWS_REGION",
    help="AWS region of the Glue catalog",
)

CatalogIdOpt = typer.Option(
    None,
    "--catalog-id",
    envvar="GLUESYNC_CATALOG_ID",
    help="Glue catalog id (AWS account) when not the caller's own",
)

DdlOpt = typer.Option(
    None,
    "--ddl",
    help="Source table DDL text",
)

DdlFileOpt = typer.Option(
    None,
    "--ddl-file",
    exists=True,
    dir_okay=False,
    readable=True,
    help="File holding the source table DDL",
)

PointerOpt = typer.Option(
    ...,
    "--pointer",
    help="Current snapshot pointer (metadata file location)",
)

StreamOpt = typer.Option(
    None,
    "--stream",
    help="Stream to acknowledge after the catalog is updated",
)

OptimisticOpt = typer.Option(
    False,
    "--optimistic",
    help="Fail the update if the table changed since it was read",
)

ParallelOpt = typer.Option(
    4,
    "--parallel",
    "-n",
    help="Number of tables to reconcile in parallel",
)

AllOpt = typer.Option(
    False,
    "--all",
    help="Sync every listed table without the selection UI",
)

YesOpt = typer.Option(
    False,
    "--yes",
    help="Skip confirmation prompt",
)

DryRunOpt = typer.Option(
    False,
    "--dry-run",
    help="Show which tables would be synced, but don't sync anything",
)

SnowflakeAccountOpt = typer.Option(None, "--sf-account", envvar="SNOWFLAKE_ACCOUNT")
SnowflakeUserOpt = typer.Option(None, "--sf-user", envvar="SNOWFLAKE_USER")
SnowflakePasswordOpt = typer.Option(
    None, "--sf-password", envvar="SNOWFLAKE_PASSWORD", hide_input=True
)
SnowflakeWarehouseOpt = typer.Option(None, "--sf-warehouse", envvar="SNOWFLAKE_WAREHOUSE")
SnowflakeRoleOpt = typer.Option(None, "--sf-role", envvar="SNOWFLAKE_ROLE")


def read_ddl(ddl: str | None, ddl_file: Path | None) -> str | None:
    """Return the DDL from --ddl or --ddl-file (the file wins)."""
    if ddl_file is not None:
        return ddl_file.read_text()
    return ddl
