# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .. import __version__
from ..core.logging import build_logger
from ..errors import PyStagedError
from ..orchestration.orchestrator import Orchestrator
from .options import (
    COLOR_OPTION,
    CONFIG_OPTION,
    CWD_OPTION,
    DEBUG_OPTION,
    EMOJI_OPTION,
    JOBS_OPTION,
    QUIET_OPTION,
    TIMEOUT_OPTION,
    RunCLIOptions,
)
from .reporting import emit_summary

app = typer.Typer(
    name="pystaged",
    help="Run commands against files staged in git, grouped by glob pattern.",
    add_completion=False,
    no_args_is_help=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"pystaged {__version__}")
        raise typer.Exit(code=0)


@app.command()
def run(
    cwd: CWD_OPTION = Path("."),
    config_path: CONFIG_OPTION = None,
    jobs: JOBS_OPTION = None,
    timeout: TIMEOUT_OPTION = None,
    quiet: QUIET_OPTION = False,
    debug: DEBUG_OPTION = False,
    emoji: EMOJI_OPTION = True,
    color: COLOR_OPTION = True,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit."),
    ] = False,
) -> None:
    """Run configured commands against staged files.

    Raises:
        typer.Exit: Always raised to terminate with the run's exit status.
    """

    options = RunCLIOptions(
        cwd=cwd,
        config_path=config_path,
        jobs=jobs,
        timeout=timeout,
        quiet=quiet,
        debug=debug,
        emoji=emoji,
        color=color,
    )
    logger = build_logger(emoji=emoji, color=color, debug=debug)
    try:
        settings = options.to_settings()
        outcome = Orchestrator(settings, logger=logger).run()
    except PyStagedError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    emit_summary(outcome, logger=logger)
    raise typer.Exit(code=outcome.exit_code)


def main() -> None:
    """Console script entry point."""

    app()


__all__ = ["app", "main", "run"]
