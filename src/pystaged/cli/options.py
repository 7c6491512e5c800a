# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Option declarations and data structures for the pystaged command."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer

from ..config.models import RunSettings

CWD_OPTION = Annotated[
    Path,
    typer.Option(
        "--cwd",
        help="Working directory: configuration lookup, repository, and command cwd.",
        file_okay=False,
        dir_okay=True,
    ),
]
CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Explicit configuration file (JSON, package.json, or pyproject.toml)."),
]
JOBS_OPTION = Annotated[
    int | None,
    typer.Option("--jobs", "-j", min=1, help="Maximum number of rules run concurrently."),
]
TIMEOUT_OPTION = Annotated[
    float | None,
    typer.Option("--timeout", help="Per-command timeout in seconds."),
]
QUIET_OPTION = Annotated[
    bool,
    typer.Option("--quiet", "-q", help="Exit successfully when nothing is staged."),
]
DEBUG_OPTION = Annotated[
    bool,
    typer.Option("--debug", "-d", help="Print debug output."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
COLOR_OPTION = Annotated[
    bool,
    typer.Option("--color/--no-color", help="Toggle coloured output."),
]


@dataclass(slots=True)
class RunCLIOptions:
    """Capture CLI options for a single run."""

    cwd: Path
    config_path: Path | None
    jobs: int | None
    timeout: float | None
    quiet: bool
    debug: bool
    emoji: bool
    color: bool

    def to_settings(self) -> RunSettings:
        """Return validated :class:`RunSettings` for these options.

        Raises:
            ConfigError: If the options fail validation.
        """

        return RunSettings.build(
            cwd=self.cwd,
            config_path=self.config_path,
            jobs=self.jobs,
            timeout=self.timeout,
            quiet=self.quiet,
            debug=self.debug,
            emoji=self.emoji,
            color=self.color,
        )


__all__ = [
    "COLOR_OPTION",
    "CONFIG_OPTION",
    "CWD_OPTION",
    "DEBUG_OPTION",
    "EMOJI_OPTION",
    "JOBS_OPTION",
    "QUIET_OPTION",
    "RunCLIOptions",
    "TIMEOUT_OPTION",
]
