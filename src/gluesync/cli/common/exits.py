"""Exit codes and exit helpers for gluesync commands.

  0  every table reconciled (or nothing to do)
  1  a table failed, or its catalog write committed but the stream was not cleared
  2  bad invocation or unreadable input
"""

from typing import Iterable, NoReturn

import typer

from gluesync.cli.common.output import out
from gluesync.core.reconcile import ReconcileResult

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def ok_exit(msg: str | None = None) -> NoReturn:
    if msg:
        out.info(msg)
    raise typer.Exit(EXIT_OK)


def warn_exit(msg: str, code: int = EXIT_OK) -> NoReturn:
    out.warn(msg)
    raise typer.Exit(code)


def fail(msg: str, code: int = EXIT_FAILED) -> NoReturn:
    """Print an error and stop the command."""
    out.error(msg)
    raise typer.Exit(code)


def usage_error(msg: str) -> NoReturn:
    fail(msg, code=EXIT_USAGE)


def exit_from_exc(exc: Exception, *, message: str, code: int = EXIT_FAILED) -> NoReturn:
    """Like `fail`, chaining the exception that caused the exit."""
    out.error(message)
    raise typer.Exit(code) from exc


def exit_code_for(results: Iterable[ReconcileResult]) -> int:
    """Return the exit code for a run: 1 unless every result is ok."""
    return EXIT_OK if all(r.ok for r in results) else EXIT_FAILED
