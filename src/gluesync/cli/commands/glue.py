"""Commands for inspecting the Glue catalog."""

from __future__ import annotations

import typer

from gluesync.cli.common.context import GlueAppContext, build_glue_context
from gluesync.cli.common.exits import exit_from_exc
from gluesync.cli.common.options import CatalogIdOpt, ProfileOpt, RegionOpt
from gluesync.cli.common.output import out
from gluesync.core.catalog import check_table_status
from gluesync.core.errors import CatalogError, EntityNotFound
from gluesync.core.glue import TableIdentity

glue_app = typer.Typer(
    help="Glue catalog inspection.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@glue_app.callback()
def _init(
    ctx: typer.Context,
    profile: str | None = ProfileOpt,
    region: str | None = RegionOpt,
    catalog_id: str | None = CatalogIdOpt,
):
    """Initialize Glue context."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)
    ctx.obj = build_glue_context(profile, region, catalog_id)


@glue_app.command("check")
def check(
    ctx: typer.Context,
    database: str = typer.Argument(..., help="Glue database"),
    table: str = typer.Argument(..., help="Glue table"),
):
    """Report whether a table exists in its database or elsewhere in the catalog."""
    appctx: GlueAppContext = ctx.obj

    with out.status("Checking catalog..."):
        status = check_table_status(
            appctx.adapter, TableIdentity(database=database, table=table)
        )

    out.kv(
        {
            "Database exists": status.db_exists,
            "Table in database": status.table_in_target_db,
            "Other databases": ", ".join(status.other_databases) or "-",
        }
    )
    if status.ok:
        out.success(status.message)
    elif status.code == "006":
        out.error(status.message)
        raise typer.Exit(1)
    else:
        out.warn(status.message)
        raise typer.Exit(1)


@glue_app.command("columns")
def columns(
    ctx: typer.Context,
    database: str = typer.Argument(..., help="Glue database"),
    table: str = typer.Argument(..., help="Glue table"),
):
    """Show a table's columns and snapshot pointers as stored in Glue."""
    appctx: GlueAppContext = ctx.obj
    identity = TableIdentity(database=database, table=table)

    try:
        with out.status("Loading table..."):
            record = appctx.adapter.get_table(identity)
    except EntityNotFound as exc:
        exit_from_exc(exc, message=f"Table '{identity.full_name}' does not exist.", code=1)
    except CatalogError as exc:
        exit_from_exc(exc, message=f"Could not read '{identity.full_name}': {exc}", code=1)

    out.header(identity.full_name)
    out.kv(
        {
            "Location": record.location or "-",
            "Metadata location": record.metadata_location or "-",
            "Previous metadata location": record.previous_metadata_location or "-",
        }
    )
    out.columns_table(record.columns, title="Columns")
