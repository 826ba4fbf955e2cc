"""CLI application for Glue catalog synchronization."""

import typer

from gluesync.cli.commands.glue import glue_app
from gluesync.cli.commands.sync import sync_app
from gluesync.cli.common.logs import configure_logging

app = typer.Typer(
    help="gluesync - keep Glue Iceberg tables in sync with their source tables",
    no_args_is_help=True,
)


@app.callback()
def _main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Configure logging for every command."""
    configure_logging(verbose)


app.add_typer(sync_app, name="sync", help="Create/update Glue tables from source tables.")
app.add_typer(glue_app, name="glue")


if __name__ == "__main__":
    app()
