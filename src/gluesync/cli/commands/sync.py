"""Commands for reconciling Glue tables with their source tables."""

from __future__ import annotations

from pathlib import Path

import typer

from gluesync.cli.common.context import GlueOptions, build_snowflake_source
from gluesync.cli.common.exits import (
    EXIT_USAGE,
    exit_code_for,
    exit_from_exc,
    ok_exit,
    usage_error,
    warn_exit,
)
from gluesync.cli.common.options import (
    AllOpt,
    CatalogIdOpt,
    DdlFileOpt,
    DdlOpt,
    DryRunOpt,
    OptimisticOpt,
    ParallelOpt,
    PointerOpt,
    ProfileOpt,
    RegionOpt,
    SnowflakeAccountOpt,
    SnowflakePasswordOpt,
    SnowflakeRoleOpt,
    SnowflakeUserOpt,
    SnowflakeWarehouseOpt,
    StreamOpt,
    YesOpt,
    read_ddl,
)
from gluesync.cli.common.output import out
from gluesync.cli.common.progress import reconcile_with_progress
from gluesync.cli.tui import select_entries
from gluesync.core.batch import load_table_list
from gluesync.core.ddl import parse_columns
from gluesync.core.errors import MalformedDDL
from gluesync.core.reconcile import Reconciler

sync_app = typer.Typer(
    help="Reconcile Glue tables with source DDL and snapshot pointers.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@sync_app.callback()
def _init(
    ctx: typer.Context,
    profile: str | None = ProfileOpt,
    region: str | None = RegionOpt,
    catalog_id: str | None = CatalogIdOpt,
):
    """Capture catalog options; clients are built by the commands that need them."""
    ctx.obj = GlueOptions(profile=profile, region=region, catalog_id=catalog_id)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


def _require_ddl(ddl: str | None, ddl_file: Path | None) -> str:
    """Return the DDL text or exit with a usage error."""
    text = read_ddl(ddl, ddl_file)
    if not text or not text.strip():
        usage_error("Missing DDL. Provide --ddl or --ddl-file.")
    return text


@sync_app.command("preview")
def preview(
    ddl: str | None = DdlOpt,
    ddl_file: Path | None = DdlFileOpt,
):
    """Show the catalog columns a DDL maps to, without touching the catalog."""
    text = _require_ddl(ddl, ddl_file)
    try:
        schema = parse_columns(text)
    except MalformedDDL as exc:
        exit_from_exc(exc, message=f"{exc.code.value}: {exc}", code=EXIT_USAGE)

    out.columns_table(schema.columns, title="Mapped columns")
    out.warnings(schema.warnings)
    out.info(f"Columns: {len(schema.columns)} | Warnings: {len(schema.warnings)}")


@sync_app.command("table")
def sync_table(
    ctx: typer.Context,
    database: str = typer.Argument(..., help="Glue database"),
    table: str = typer.Argument(..., help="Glue table"),
    ddl: str | None = DdlOpt,
    ddl_file: Path | None = DdlFileOpt,
    pointer: str = PointerOpt,
    stream: str | None = StreamOpt,
    optimistic: bool = OptimisticOpt,
    sf_account: str | None = SnowflakeAccountOpt,
    sf_user: str | None = SnowflakeUserOpt,
    sf_password: str | None = SnowflakePasswordOpt,
    sf_warehouse: str | None = SnowflakeWarehouseOpt,
    sf_role: str | None = SnowflakeRoleOpt,
):
    """Create or update one Glue table from a DDL and snapshot pointer."""
    options: GlueOptions = ctx.obj
    source_ddl = _require_ddl(ddl, ddl_file)

    appctx = options.build()
    change_log = (
        build_snowflake_source(
            account=sf_account,
            user=sf_user,
            password=sf_password,
            warehouse=sf_warehouse,
            role=sf_role,
        )
        if stream
        else None
    )
    reconciler = Reconciler(appctx.adapter, change_log, optimistic=optimistic)

    with out.status(f"Reconciling {database}.{table}..."):
        result = reconciler.reconcile(database, table, source_ddl, pointer, stream)

    out.result(result)
    if not result.ok:
        raise typer.Exit(exit_code_for([result]))


@sync_app.command("many")
def sync_many(
    ctx: typer.Context,
    table_list: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="JSON driving list"
    ),
    all_: bool = AllOpt,
    parallel: int = ParallelOpt,
    dry_run: bool = DryRunOpt,
    yes: bool = YesOpt,
    optimistic: bool = OptimisticOpt,
    sf_account: str | None = SnowflakeAccountOpt,
    sf_user: str | None = SnowflakeUserOpt,
    sf_password: str | None = SnowflakePasswordOpt,
    sf_warehouse: str | None = SnowflakeWarehouseOpt,
    sf_role: str | None = SnowflakeRoleOpt,
):
    """Sync every table of a driving list, reading DDL and pointers from Snowflake."""
    options: GlueOptions = ctx.obj
    if parallel < 1:
        usage_error("--parallel must be >= 1")

    try:
        entries = load_table_list(table_list)
    except ValueError as exc:
        exit_from_exc(exc, message=str(exc), code=EXIT_USAGE)

    if not entries:
        warn_exit("No enabled tables in the list.", code=0)

    out.header("Listed tables")
    out.entries_table(entries, title="Driving list")

    selected = entries if all_ else select_entries(entries)
    if not selected:
        warn_exit("No tables selected.", code=0)

    out.info(f"Listed: {len(entries)} | Selected: {len(selected)}")
    if dry_run:
        out.entries_table(selected, title="Would sync")
        warn_exit("DRY RUN: no tables were synced.", code=0)

    if not yes and not out.confirm("Sync the selected tables?"):
        ok_exit("Cancelled.")

    appctx = options.build()
    source = build_snowflake_source(
        account=sf_account,
        user=sf_user,
        password=sf_password,
        warehouse=sf_warehouse,
        role=sf_role,
    )
    reconciler = Reconciler(appctx.adapter, source, optimistic=optimistic)

    results = reconcile_with_progress(reconciler, source, selected, parallel)
    out.results_table(results, title="Sync results")

    failed = [r for r in results if not r.ok]
    if failed:
        out.error(f"{len(failed)} of {len(results)} table(s) did not sync cleanly.")
        raise typer.Exit(exit_code_for(results))

    out.success(f"Synced {len(results)} table(s).")
