# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for parallel rule dispatch."""

from __future__ import annotations

import sys
import threading
from pathlib import Path

import pytest
from conftest import RecordingRunner

from pystaged.core.logging import build_logger
from pystaged.errors import CommandExitError, CommandSpawnError, EmptyStagedSet
from pystaged.execution.dispatcher import (
    CommandInvocation,
    CommandResult,
    CommandStatus,
    DispatchReport,
    Dispatcher,
    split_command,
)
from pystaged.patterns import PatternSet


def _dispatcher(runner: RecordingRunner, *, jobs: int = 4, timeout: float | None = None) -> Dispatcher:
    return Dispatcher(runner=runner, logger=build_logger(emoji=False, color=False), jobs=jobs, timeout=timeout)


def test_split_command_uses_plain_whitespace() -> None:
    assert split_command("  eslint   --fix\t--quiet ") == ("eslint", ("--fix", "--quiet"))
    assert split_command('echo "a b"') == ("echo", ('"a', 'b"'))
    with pytest.raises(ValueError):
        split_command("   ")


def test_invocation_appends_matched_paths_after_static_args(tmp_path: Path) -> None:
    invocation = CommandInvocation.from_command("prettier --write", [tmp_path / "a.ts"])

    assert invocation.argv == ["prettier", "--write", str(tmp_path / "a.ts")]


def test_only_matching_files_are_passed(tmp_path: Path, recording_runner: RecordingRunner) -> None:
    staged = [tmp_path / "a.js", tmp_path / "b.txt"]

    report = _dispatcher(recording_runner).run(PatternSet.compile({"*.js": "echo"}), staged, tmp_path)

    assert recording_runner.calls == [["echo", str(tmp_path / "a.js")]]
    assert report.succeeded
    assert report.exit_code == 0


def test_commands_within_a_rule_run_in_declared_order(tmp_path: Path, recording_runner: RecordingRunner) -> None:
    staged = [tmp_path / "x.ts"]

    report = _dispatcher(recording_runner).run(PatternSet.compile({"*.ts": ["fmt", "lint"]}), staged, tmp_path)

    assert recording_runner.calls == [["fmt", str(tmp_path / "x.ts")], ["lint", str(tmp_path / "x.ts")]]
    assert [result.command for result in report.results] == ["fmt", "lint"]


def test_failing_rule_does_not_stop_sibling_rules(tmp_path: Path) -> None:
    runner = RecordingRunner(returncodes={"eslint": 1})
    staged = [tmp_path / "app.js", tmp_path / "tool.py"]
    pattern_set = PatternSet.compile({"*.js": "eslint", "*.py": ["ruff check", "mypy"]})

    report = _dispatcher(runner).run(pattern_set, staged, tmp_path)

    assert sorted(runner.executables()) == ["eslint", "mypy", "ruff"]
    assert not report.succeeded
    assert report.exit_code == 1
    (failure,) = report.failures
    assert failure.pattern == "*.js"
    assert isinstance(failure.error, CommandExitError)
    assert failure.error.returncode == 1
    passed = [result.command for result in report.results if result.status is CommandStatus.PASSED]
    assert passed == ["ruff check", "mypy"]


def test_spawn_failure_is_recorded_and_rule_continues(tmp_path: Path) -> None:
    runner = RecordingRunner(missing=["no-such-tool"])
    staged = [tmp_path / "main.go"]

    report = _dispatcher(runner).run(PatternSet.compile({"*.go": ["no-such-tool", "gofmt -l"]}), staged, tmp_path)

    assert runner.executables() == ["no-such-tool", "gofmt"]
    (failure,) = report.failures
    assert isinstance(failure.error, CommandSpawnError)
    assert failure.returncode is None
    assert report.results[1].status is CommandStatus.PASSED


def test_empty_staged_set_spawns_nothing(tmp_path: Path, recording_runner: RecordingRunner) -> None:
    with pytest.raises(EmptyStagedSet):
        _dispatcher(recording_runner).run(PatternSet.compile({"*": "echo"}), [], tmp_path)

    assert recording_runner.calls == []


def test_rule_without_matches_is_skipped(tmp_path: Path, recording_runner: RecordingRunner) -> None:
    staged = [tmp_path / "README.md"]

    report = _dispatcher(recording_runner).run(PatternSet.compile({"*.py": ["ruff", "mypy"]}), staged, tmp_path)

    assert recording_runner.calls == []
    assert [result.status for result in report.results] == [CommandStatus.SKIPPED, CommandStatus.SKIPPED]
    assert report.spawned == 0
    assert report.succeeded


def test_results_are_ordered_by_rule_then_command(tmp_path: Path, recording_runner: RecordingRunner) -> None:
    staged = [tmp_path / "a.css", tmp_path / "a.js"]
    pattern_set = PatternSet.compile({"*.js": ["one", "two"], "*.css": "three"})

    report = _dispatcher(recording_runner).run(pattern_set, staged, tmp_path)

    assert [(result.rule_index, result.command_index) for result in report.results] == [(0, 0), (0, 1), (1, 0)]


def test_options_carry_cwd_and_timeout(tmp_path: Path, recording_runner: RecordingRunner) -> None:
    _dispatcher(recording_runner, timeout=12.5).run(
        PatternSet.compile({"*": "echo"}),
        [tmp_path / "a"],
        tmp_path,
    )

    (options,) = recording_runner.options
    assert options is not None
    assert options.cwd == tmp_path
    assert options.timeout == 12.5
    assert options.capture_output
    assert options.discard_stdin


def test_matching_is_anchored_to_root_not_cwd(tmp_path: Path, recording_runner: RecordingRunner) -> None:
    root = tmp_path
    cwd = tmp_path / "web"
    staged = [root / "web" / "app.js", root / "app.js"]

    _dispatcher(recording_runner).run(PatternSet.compile({"web/*.js": "eslint"}), staged, cwd, root=root)

    assert recording_runner.calls == [["eslint", str(root / "web" / "app.js")]]


def test_rules_run_concurrently(tmp_path: Path) -> None:
    barrier = threading.Barrier(2, timeout=10)
    runner = RecordingRunner(on_call=lambda argv: barrier.wait())
    staged = [tmp_path / "a.js", tmp_path / "a.py"]

    report = _dispatcher(runner, jobs=2).run(PatternSet.compile({"*.js": "eslint", "*.py": "ruff"}), staged, tmp_path)

    assert report.succeeded
    assert sorted(runner.executables()) == ["eslint", "ruff"]


@pytest.mark.skipif(" " in sys.executable, reason="interpreter path contains whitespace")
def test_real_processes_are_waited_for(tmp_path: Path) -> None:
    target = tmp_path / "a.txt"
    target.write_text("data\n", encoding="utf-8")
    pattern_set = PatternSet.compile(
        {
            "*.txt": [f"{sys.executable} -c pass", f"{sys.executable} -c raise"],
        },
    )
    dispatcher = Dispatcher(logger=build_logger(emoji=False, color=False), jobs=2)

    report = dispatcher.run(pattern_set, [target], tmp_path)

    assert [result.status for result in report.results] == [CommandStatus.PASSED, CommandStatus.FAILED]
    assert all(result.returncode is not None for result in report.results)
    assert report.exit_code == 1


@pytest.mark.skipif(" " in sys.executable, reason="interpreter path contains whitespace")
def test_undecodable_output_is_recorded_on_the_result(tmp_path: Path) -> None:
    script = tmp_path / "emit.py"
    script.write_text('import sys\nsys.stdout.buffer.write(b"\\xff\\xfe bad")\nsys.exit(1)\n', encoding="utf-8")
    staged = [tmp_path / "a.txt", tmp_path / "README.md"]
    pattern_set = PatternSet.compile({"*.txt": f"{sys.executable} {script}", "*.md": f"{sys.executable} -c pass"})
    dispatcher = Dispatcher(logger=build_logger(emoji=False, color=False), jobs=2)

    report = dispatcher.run(pattern_set, staged, tmp_path)

    assert [result.status for result in report.results] == [CommandStatus.FAILED, CommandStatus.PASSED]
    (failure,) = report.failures
    assert isinstance(failure.error, CommandExitError)
    assert failure.returncode == 1
    assert failure.stdout.endswith(" bad")


def test_unexpected_runner_error_is_recorded_and_siblings_finish(tmp_path: Path) -> None:
    def explode(argv: list[str]) -> None:
        if argv[0] == "flaky":
            raise RuntimeError("runner exploded")

    runner = RecordingRunner(on_call=explode)
    staged = [tmp_path / "a.js", tmp_path / "a.py"]
    pattern_set = PatternSet.compile({"*.js": ["flaky", "eslint"], "*.py": "ruff"})

    report = _dispatcher(runner, jobs=2).run(pattern_set, staged, tmp_path)

    assert sorted(runner.executables()) == ["eslint", "flaky", "ruff"]
    (failure,) = report.failures
    assert failure.command == "flaky"
    assert isinstance(failure.error, CommandSpawnError)
    assert "RuntimeError" in str(failure.error)
    assert report.exit_code == 1
    passed = [result.command for result in report.results if result.status is CommandStatus.PASSED]
    assert passed == ["eslint", "ruff"]


@pytest.mark.parametrize(
    "member",
    [
        CommandInvocation.from_command,
        CommandResult.failed,
        DispatchReport.failures,
        DispatchReport.skipped,
        DispatchReport.spawned,
        DispatchReport.succeeded,
        DispatchReport.exit_code,
        EmptyStagedSet.__init__,
        CommandExitError.__init__,
    ],
)
def test_public_members_are_documented(member: object) -> None:
    assert (getattr(member, "__doc__", None) or "").strip()
