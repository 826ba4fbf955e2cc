"""Logging setup for the CLI.

Core modules log through ``logging.getLogger(__name__)``; the CLI routes the
``gluesync`` logger to stderr through rich so log lines never mix with
command output on stdout.
"""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from gluesync.cli.common.output import err_console

LOGGER_NAME = "gluesync"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a rich handler to the package logger (idempotent)."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=err_console,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
