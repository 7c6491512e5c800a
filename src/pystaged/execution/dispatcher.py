# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run each rule's commands against the staged files it matches."""

from __future__ import annotations

import threading
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..config.models import default_parallel_jobs
from ..core.logging import ConsoleLogger, build_logger
from ..core.runtime.process import CommandOptions, CommandRunner, run_command
from ..errors import CommandError, CommandExitError, CommandSpawnError, EmptyStagedSet, ExitCode
from ..patterns import PatternSet, Rule


class CommandStatus(str, Enum):
    """Outcome category of a single rule/command pair."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


def split_command(command: str) -> tuple[str, tuple[str, ...]]:
    """Split ``command`` on whitespace into an executable and static arguments.

    Quotes and escapes are not interpreted: ``eslint "a b"`` yields the two
    arguments ``"a`` and ``b"``.

    Args:
        command: Command string as declared in configuration.

    Returns:
        tuple[str, tuple[str, ...]]: Executable and its static arguments.

    Raises:
        ValueError: If ``command`` contains no words.
    """

    words = command.split()
    if not words:
        raise ValueError("command must contain an executable")
    return words[0], tuple(words[1:])


@dataclass(frozen=True, slots=True)
class CommandInvocation:
    """A single process launch: executable, configured args, then matched paths."""

    executable: str
    static_args: tuple[str, ...]
    dynamic_args: tuple[Path, ...]

    @classmethod
    def from_command(cls, command: str, paths: Sequence[Path]) -> CommandInvocation:
        """Build an invocation from a configured command string and matched paths.

        Args:
            command: Command string as declared in configuration.
            paths: Staged paths appended after the static arguments.

        Returns:
            CommandInvocation: Invocation ready to be spawned.

        Raises:
            ValueError: If ``command`` contains no words.
        """

        executable, static_args = split_command(command)
        return cls(executable=executable, static_args=static_args, dynamic_args=tuple(paths))

    @property
    def argv(self) -> list[str]:
        """Return the full argument vector passed to the child process."""

        return [self.executable, *self.static_args, *(str(path) for path in self.dynamic_args)]


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Recorded outcome of one command declared by one rule."""

    pattern: str
    command: str
    rule_index: int
    command_index: int
    status: CommandStatus
    invocation: CommandInvocation | None = None
    returncode: int | None = None
    stdout: str = ""
    stderr: str = ""
    error: CommandError | None = None
    duration: float = 0.0

    @property
    def failed(self) -> bool:
        """Return whether the command could not start or exited non-zero."""

        return self.status is CommandStatus.FAILED


@dataclass(frozen=True, slots=True)
class DispatchReport:
    """Aggregate of every command result produced by one dispatch run."""

    results: tuple[CommandResult, ...] = ()

    @property
    def failures(self) -> tuple[CommandResult, ...]:
        """Return the failed results in rule, then command, order."""

        return tuple(result for result in self.results if result.failed)

    @property
    def skipped(self) -> tuple[CommandResult, ...]:
        """Return results for commands whose rule matched no staged files."""

        return tuple(result for result in self.results if result.status is CommandStatus.SKIPPED)

    @property
    def spawned(self) -> int:
        """Return the number of commands that were launched (or attempted)."""

        return sum(1 for result in self.results if result.status is not CommandStatus.SKIPPED)

    @property
    def succeeded(self) -> bool:
        """Return whether no dispatched command failed."""

        return not self.failures

    @property
    def exit_code(self) -> int:
        """Return the process exit status summarising the report.

        Returns:
            int: ``0`` when every command passed, otherwise ``1``.
        """

        return int(ExitCode.SUCCESS if self.succeeded else ExitCode.COMMAND_FAILED)


class Dispatcher:
    """Fan rules out over a thread pool, running each rule's commands in order."""

    def __init__(
        self,
        *,
        runner: CommandRunner | None = None,
        logger: ConsoleLogger | None = None,
        jobs: int | None = None,
        timeout: float | None = None,
    ) -> None:
        """Create a dispatcher.

        Args:
            runner: Callable used to spawn processes; defaults to :func:`run_command`.
            logger: Logging handle receiving progress and failure output.
            jobs: Maximum number of rules processed concurrently.
            timeout: Optional per-command timeout in seconds.
        """

        self._runner: CommandRunner = runner or run_command
        self._logger = logger or build_logger()
        self._jobs = max(1, jobs if jobs is not None else default_parallel_jobs())
        self._timeout = timeout
        self._output_lock = threading.Lock()

    def run(
        self,
        pattern_set: PatternSet,
        staged: Sequence[Path],
        cwd: Path,
        *,
        root: Path | None = None,
    ) -> DispatchReport:
        """Run every rule against ``staged`` and wait for all commands to finish.

        Args:
            pattern_set: Compiled rules.
            staged: Absolute staged paths.
            cwd: Working directory for spawned commands.
            root: Directory glob matching is anchored to; defaults to ``cwd``.

        Returns:
            DispatchReport: Results ordered by rule, then by command.

        Raises:
            EmptyStagedSet: If ``staged`` is empty. No command is spawned.
        """

        if not staged:
            raise EmptyStagedSet()
        match_root = root if root is not None else cwd
        rules = tuple(pattern_set)
        if not rules:
            return DispatchReport()

        collected: dict[int, list[CommandResult]] = {}
        workers = min(self._jobs, len(rules))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pystaged-rule") as executor:
            future_map = {
                executor.submit(self._run_rule, index, rule, staged, cwd, match_root): index
                for index, rule in enumerate(rules)
            }
            for future in as_completed(future_map):
                collected[future_map[future]] = future.result()

        ordered = [result for index in sorted(collected) for result in collected[index]]
        return DispatchReport(results=tuple(ordered))

    def _run_rule(
        self,
        index: int,
        rule: Rule,
        staged: Sequence[Path],
        cwd: Path,
        match_root: Path,
    ) -> list[CommandResult]:
        filtered = rule.match_all(staged, root=match_root)
        self._logger.debug(f"rule pattern={rule.pattern!r} matched={len(filtered)}")
        if not filtered:
            self._logger.debug(f"skip pattern={rule.pattern!r} reason=no-matching-files")
            return [
                CommandResult(
                    pattern=rule.pattern,
                    command=command,
                    rule_index=index,
                    command_index=position,
                    status=CommandStatus.SKIPPED,
                )
                for position, command in enumerate(rule.commands)
            ]
        return [
            self._run_command(index, position, rule, command, filtered, cwd)
            for position, command in enumerate(rule.commands)
        ]

    def _run_command(
        self,
        rule_index: int,
        command_index: int,
        rule: Rule,
        command: str,
        filtered: Sequence[Path],
        cwd: Path,
    ) -> CommandResult:
        invocation = CommandInvocation.from_command(command, filtered)
        argv = invocation.argv
        self._logger.debug(f"spawn pattern={rule.pattern!r} command={command!r} files={len(filtered)}")
        options = CommandOptions(
            cwd=cwd,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=self._timeout,
            discard_stdin=True,
        )
        started = time.perf_counter()
        try:
            completed = self._runner(argv, options=options)
        except Exception as exc:  # noqa: BLE001 - recorded on the result
            reason = "failed to start" if isinstance(exc, OSError) else f"failed while running ({type(exc).__name__})"
            error = CommandSpawnError(
                f"{invocation.executable}: {reason}: {exc}",
                pattern=rule.pattern,
                command=command,
                argv=argv,
            )
            result = CommandResult(
                pattern=rule.pattern,
                command=command,
                rule_index=rule_index,
                command_index=command_index,
                status=CommandStatus.FAILED,
                invocation=invocation,
                error=error,
                duration=time.perf_counter() - started,
            )
            self._report(result)
            return result

        duration = time.perf_counter() - started
        stdout = completed.stdout or ""
        stderr = completed.stderr or ""
        exit_error: CommandExitError | None = None
        if completed.returncode != 0:
            exit_error = CommandExitError(
                f"{invocation.executable}: exited with status {completed.returncode}",
                pattern=rule.pattern,
                command=command,
                argv=argv,
                returncode=completed.returncode,
                stdout=stdout,
                stderr=stderr,
            )
        result = CommandResult(
            pattern=rule.pattern,
            command=command,
            rule_index=rule_index,
            command_index=command_index,
            status=CommandStatus.FAILED if exit_error else CommandStatus.PASSED,
            invocation=invocation,
            returncode=completed.returncode,
            stdout=stdout,
            stderr=stderr,
            error=exit_error,
            duration=duration,
        )
        self._report(result)
        return result

    def _report(self, result: CommandResult) -> None:
        """Print the outcome of ``result`` as one uninterrupted block."""

        files = len(result.invocation.dynamic_args) if result.invocation else 0
        label = f"{result.pattern}: {result.command}"
        with self._output_lock:
            if result.failed:
                self._logger.fail(f"{label} ({result.error})")
            else:
                self._logger.ok(f"{label} ({files} file{'s' if files != 1 else ''}, {result.duration:.2f}s)")
            if result.failed or self._logger.debug_enabled:
                for stream in (result.stdout, result.stderr):
                    if stream.strip():
                        self._logger.echo(stream.rstrip())


__all__ = [
    "CommandInvocation",
    "CommandResult",
    "CommandStatus",
    "DispatchReport",
    "Dispatcher",
    "split_command",
]
