# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared by configuration, discovery, and dispatch."""

from __future__ import annotations

from collections.abc import Sequence
from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit statuses reported by the command line interface."""

    SUCCESS = 0
    COMMAND_FAILED = 1
    USAGE = 2
    REPOSITORY = 3


class PyStagedError(RuntimeError):
    """Base class for every error raised by pystaged."""

    default_exit_code: ExitCode = ExitCode.USAGE

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        """Initialise the error with a message and optional exit status.

        Args:
            message: Human-readable description of the failure.
            exit_code: Exit status overriding :attr:`default_exit_code`.
        """

        super().__init__(message)
        self.exit_code = int(self.default_exit_code if exit_code is None else exit_code)


class ConfigError(PyStagedError):
    """Raised when a glob pattern or a command value cannot be compiled."""


class VcsQueryError(PyStagedError):
    """Raised when git cannot be queried for repository state."""

    default_exit_code = ExitCode.REPOSITORY


class NotAGitRepository(VcsQueryError):
    """Raised when the requested directory is not inside a git work tree."""


class EmptyStagedSet(PyStagedError):
    """Raised when the index holds no staged changes."""

    def __init__(self, message: str = "No staged files found.", *, exit_code: int | None = None) -> None:
        """Initialise the error with an optional custom message.

        Args:
            message: Human-readable description of the failure.
            exit_code: Exit status overriding :attr:`default_exit_code`.
        """

        super().__init__(message, exit_code=exit_code)


class CommandError(PyStagedError):
    """Per-invocation failure recorded by the dispatcher.

    Instances are stored on results rather than raised so sibling work
    keeps running.
    """

    default_exit_code = ExitCode.COMMAND_FAILED

    def __init__(self, message: str, *, pattern: str, command: str, argv: Sequence[str]) -> None:
        """Capture the rule and command that failed.

        Args:
            message: Human-readable description of the failure.
            pattern: Glob pattern of the rule that owned the command.
            command: Command string as declared in configuration.
            argv: Full argument vector that was (or would have been) spawned.
        """

        super().__init__(message)
        self.pattern = pattern
        self.command = command
        self.argv = tuple(argv)


class CommandSpawnError(CommandError):
    """The executable was not found or the process failed to launch."""


class CommandExitError(CommandError):
    """The spawned process exited with a non-zero status."""

    def __init__(
        self,
        message: str,
        *,
        pattern: str,
        command: str,
        argv: Sequence[str],
        returncode: int,
        stdout: str | None = None,
        stderr: str | None = None,
    ) -> None:
        """Capture the failing command together with its exit status and output.

        Args:
            message: Human-readable description of the failure.
            pattern: Glob pattern of the rule that owned the command.
            command: Command string as declared in configuration.
            argv: Full argument vector that was spawned.
            returncode: Non-zero exit status of the process.
            stdout: Captured standard output, if any.
            stderr: Captured standard error, if any.
        """

        super().__init__(message, pattern=pattern, command=command, argv=argv)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


__all__ = [
    "CommandError",
    "CommandExitError",
    "CommandSpawnError",
    "ConfigError",
    "EmptyStagedSet",
    "ExitCode",
    "NotAGitRepository",
    "PyStagedError",
    "VcsQueryError",
]
