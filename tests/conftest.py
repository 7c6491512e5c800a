# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import shutil
import subprocess
import threading
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

import pytest

from pystaged.core.runtime.process import CommandOptions

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


class RecordingRunner:
    """Runner double that records argument vectors instead of spawning processes."""

    def __init__(
        self,
        *,
        returncodes: Mapping[str, int] | None = None,
        missing: Sequence[str] = (),
        on_call: Callable[[list[str]], None] | None = None,
    ) -> None:
        self.calls: list[list[str]] = []
        self.options: list[CommandOptions | None] = []
        self._returncodes = dict(returncodes or {})
        self._missing = set(missing)
        self._on_call = on_call
        self._lock = threading.Lock()

    def __call__(self, args: Sequence[str], *, options: CommandOptions | None = None) -> subprocess.CompletedProcess[str]:
        argv = list(args)
        with self._lock:
            self.calls.append(argv)
            self.options.append(options)
        if self._on_call is not None:
            self._on_call(argv)
        executable = argv[0]
        if executable in self._missing:
            raise FileNotFoundError(f"Executable '{executable}' was not found on PATH")
        returncode = self._returncodes.get(executable, 0)
        return subprocess.CompletedProcess(argv, returncode=returncode, stdout=f"{executable} output\n", stderr="")

    def executables(self) -> list[str]:
        return [call[0] for call in self.calls]


def git(repo: Path, *args: str) -> str:
    """Run git inside ``repo`` with a deterministic identity and return stdout."""

    completed = subprocess.run(
        [
            "git",
            "-c",
            "user.name=PyStagedTest",
            "-c",
            "user.email=pystaged@example.com",
            "-c",
            "commit.gpgsign=false",
            *args,
        ],
        cwd=repo,
        check=True,
        capture_output=True,
        text=True,
    )
    return completed.stdout


@pytest.fixture
def recording_runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Return an initialised, empty git work tree."""

    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    repo = (tmp_path / "repo").resolve()
    repo.mkdir()
    git(repo, "init", "--quiet")
    return repo
