# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Locate files staged in the git index."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final

from ..core.runtime.process import CommandOptions, run_command
from ..errors import NotAGitRepository, VcsQueryError

GitRunner = Callable[[Sequence[str], Path], CompletedProcess[str]]

GIT_EXECUTABLE: Final[str] = "git"
_COPY_OR_RENAME: Final[frozenset[str]] = frozenset({"C", "R"})


@dataclass(frozen=True, slots=True)
class Repository:
    """An opened git work tree."""

    root: Path
    """Resolved top-level directory of the work tree."""

    requested: Path
    """Directory the repository was opened from."""


def dedupe_paths(paths: Iterable[Path]) -> list[Path]:
    """Return ``paths`` without repeats, keeping the first occurrence of each.

    Args:
        paths: Paths that may contain duplicates.

    Returns:
        list[Path]: Unique paths in first-seen order.
    """

    seen: set[Path] = set()
    unique: list[Path] = []
    for path in paths:
        if path in seen:
            continue
        seen.add(path)
        unique.append(path)
    return unique


def decode_git_output(value: str | bytes | None) -> str:
    """Return git output as text using the file system encoding.

    Undecodable bytes are kept as surrogate escapes, so decoded paths refer
    to the same files on disk.

    Args:
        value: Raw captured stream, already decoded text, or ``None``.

    Returns:
        str: Decoded output, empty when nothing was captured.
    """

    if value is None:
        return ""
    if isinstance(value, bytes):
        return os.fsdecode(value)
    return value


def parse_name_status(output: str) -> list[str]:
    """Return every path named in NUL-delimited ``--name-status`` output.

    Copies and renames contribute both their source and destination paths.

    Args:
        output: Raw stdout of ``git diff-index --name-status -z``.

    Returns:
        list[str]: Repository-relative paths in output order.

    Raises:
        VcsQueryError: If the output is truncated.
    """

    tokens = output.split("\0")
    if tokens and tokens[-1] == "":
        tokens.pop()
    paths: list[str] = []
    index = 0
    while index < len(tokens):
        status = tokens[index]
        arity = 2 if status[:1] in _COPY_OR_RENAME else 1
        entries = tokens[index + 1 : index + 1 + arity]
        if len(entries) != arity or not status:
            raise VcsQueryError(f"Unexpected git diff output near {status!r}")
        paths.extend(entries)
        index += 1 + arity
    return paths


class StagedFileLocator:
    """Query the git index for paths staged for the next commit."""

    def __init__(self, *, runner: GitRunner | None = None) -> None:
        """Create a locator.

        Args:
            runner: Optional callable executing git commands; defaults to a
                wrapper around :func:`run_command` capturing output.
        """

        self._runner = runner or self._default_runner

    def open(self, repo_root: Path) -> Repository:
        """Open the work tree containing ``repo_root``.

        Args:
            repo_root: Directory inside a git work tree.

        Returns:
            Repository: Handle anchored at the work tree top level.

        Raises:
            NotAGitRepository: If ``repo_root`` is not inside a work tree.
            VcsQueryError: If git cannot be executed.
        """

        if not repo_root.is_dir():
            raise NotAGitRepository(f"Not a git repository: {repo_root} is not a directory")
        completed = self._git(["rev-parse", "--show-toplevel"], repo_root)
        toplevel = completed.stdout.strip()
        if completed.returncode != 0 or not toplevel:
            detail = (completed.stderr or "").strip() or "git rev-parse failed"
            raise NotAGitRepository(f"Not a git repository: {repo_root} ({detail})")
        return Repository(root=Path(toplevel).resolve(), requested=repo_root)

    def head_tree(self, repo: Repository) -> str | None:
        """Return the tree id of the checked-out commit, or ``None`` before the first commit."""

        completed = self._git(["rev-parse", "--verify", "--quiet", "HEAD^{tree}"], repo.root)
        tree = completed.stdout.strip()
        if completed.returncode != 0 or not tree:
            return None
        return tree

    def has_initial_commit(self, repo: Repository) -> bool:
        """Return whether ``HEAD`` points at an existing commit."""

        return self.head_tree(repo) is not None

    def empty_tree(self, repo: Repository) -> str:
        """Return the id of the empty tree in the repository's hash format.

        Raises:
            VcsQueryError: If git cannot hash the empty tree.
        """

        completed = self._git(["hash-object", "-t", "tree", "--stdin"], repo.root)
        tree = completed.stdout.strip()
        if completed.returncode != 0 or not tree:
            raise VcsQueryError(f"Unable to compute the empty tree: {(completed.stderr or '').strip()}")
        return tree

    def staged_files(self, repo: Repository) -> tuple[Path, ...]:
        """Return absolute paths whose index state differs from ``HEAD``.

        Before the first commit the index is compared with the empty tree, so
        every staged path is reported.

        Args:
            repo: Repository returned by :meth:`open`.

        Returns:
            tuple[Path, ...]: Unique absolute paths in first-seen order.

        Raises:
            VcsQueryError: If git fails to compare the index.
        """

        base = self.head_tree(repo) or self.empty_tree(repo)
        completed = self._git(
            ["diff-index", "--cached", "--name-status", "-z", "-M", base, "--"],
            repo.root,
        )
        if completed.returncode != 0:
            raise VcsQueryError(f"git diff-index failed: {(completed.stderr or '').strip()}")
        relative = parse_name_status(completed.stdout or "")
        return tuple(dedupe_paths(repo.root / path for path in relative))

    def _git(self, args: Sequence[str], cwd: Path) -> CompletedProcess[str]:
        try:
            return self._runner([GIT_EXECUTABLE, *args], cwd)
        except OSError as exc:
            raise VcsQueryError(f"Unable to run git: {exc}") from exc

    @staticmethod
    def _default_runner(cmd: Sequence[str], root: Path) -> CompletedProcess[str]:
        """Execute ``cmd`` in ``root`` and decode its output as file system text.

        Output is captured as bytes so path names that are not valid UTF-8
        survive decoding and map back to the original file names.

        Args:
            cmd: Git command to execute.
            root: Working directory for the command.

        Returns:
            CompletedProcess[str]: Completed git process.
        """

        options = CommandOptions(cwd=root, capture_output=True, text=False, discard_stdin=True)
        completed = run_command(cmd, options=options)
        return CompletedProcess(
            completed.args,
            completed.returncode,
            stdout=decode_git_output(completed.stdout),
            stderr=decode_git_output(completed.stderr),
        )


__all__ = [
    "GitRunner",
    "Repository",
    "StagedFileLocator",
    "decode_git_output",
    "dedupe_paths",
    "parse_name_status",
]
