# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Compile glob → command configuration into matchable rules."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path, PurePath
from typing import Final

from .errors import ConfigError

_SEPARATOR: Final[str] = "/"
_ANCHOR_PREFIXES: Final[tuple[str, ...]] = ("./", "/")
_NEGATION_MARKERS: Final[frozenset[str]] = frozenset({"!", "^"})


@dataclass(frozen=True, slots=True)
class GlobMatcher:
    """Compiled path predicate for a single glob pattern.

    Patterns without a ``/`` match the final path component anywhere in the
    tree; patterns with a ``/`` match the whole root-relative path.
    """

    pattern: str
    regex: re.Pattern[str]
    match_base: bool

    def is_match(self, candidate: str) -> bool:
        """Return whether the forward-slash path ``candidate`` satisfies the glob.

        Args:
            candidate: Root-relative path using ``/`` separators.

        Returns:
            bool: ``True`` when the pattern accepts ``candidate``.
        """

        target = candidate.rsplit(_SEPARATOR, 1)[-1] if self.match_base else candidate
        return self.regex.fullmatch(target) is not None


@lru_cache(maxsize=256)
def compile_glob(pattern: str) -> GlobMatcher:
    """Compile ``pattern`` into a :class:`GlobMatcher`.

    Args:
        pattern: Glob expression supporting ``*``, ``**``, ``?``, character
            classes, and ``{a,b}`` alternation.

    Returns:
        GlobMatcher: Compiled matcher for ``pattern``.

    Raises:
        ConfigError: If the pattern is empty or syntactically invalid.
    """

    if not pattern.strip():
        raise ConfigError("Glob pattern must not be empty")
    body = pattern
    anchored = False
    for prefix in _ANCHOR_PREFIXES:
        if body.startswith(prefix):
            body = body[len(prefix) :]
            anchored = True
            break
    if not body:
        raise ConfigError(f"Glob pattern {pattern!r} does not name any path")
    try:
        regex = re.compile(f"(?s:{_translate(body, pattern)})")
    except re.error as exc:
        raise ConfigError(f"Invalid glob pattern {pattern!r}: {exc}") from exc
    return GlobMatcher(pattern=pattern, regex=regex, match_base=not anchored and _SEPARATOR not in body)


def _translate(body: str, pattern: str) -> str:
    """Return a regular expression equivalent to the glob ``body``.

    Args:
        body: Glob expression with any anchoring prefix removed.
        pattern: Original pattern used in error messages.

    Returns:
        str: Regular expression source without anchors.

    Raises:
        ConfigError: If a character class or alternation is left open, or
            alternations are nested.
    """

    parts: list[str] = []
    index = 0
    length = len(body)
    in_group = False
    while index < length:
        char = body[index]
        if char == "\\":
            if index + 1 >= length:
                raise ConfigError(f"Invalid glob pattern {pattern!r}: dangling escape")
            parts.append(re.escape(body[index + 1]))
            index += 2
            continue
        if char == "*":
            end = index
            while end < length and body[end] == "*":
                end += 1
            starts_segment = index == 0 or body[index - 1] == _SEPARATOR
            ends_segment = end == length or body[end] == _SEPARATOR
            if end - index >= 2 and starts_segment and ends_segment:
                if end < length:
                    parts.append("(?:.*/)?")
                    end += 1
                else:
                    parts.append(".*")
            else:
                parts.append("[^/]*")
            index = end
            continue
        if char == "?":
            parts.append("[^/]")
        elif char == "[":
            class_source, index = _translate_class(body, index, pattern)
            parts.append(class_source)
            continue
        elif char == "{":
            if in_group:
                raise ConfigError(f"Invalid glob pattern {pattern!r}: nested alternation")
            in_group = True
            parts.append("(?:")
        elif char == "," and in_group:
            parts.append("|")
        elif char == "}" and in_group:
            in_group = False
            parts.append(")")
        else:
            parts.append(re.escape(char))
        index += 1
    if in_group:
        raise ConfigError(f"Invalid glob pattern {pattern!r}: unclosed alternation")
    return "".join(parts)


def _translate_class(body: str, start: int, pattern: str) -> tuple[str, int]:
    """Translate the character class opening at ``start``.

    Args:
        body: Glob expression being translated.
        start: Index of the opening ``[``.
        pattern: Original pattern used in error messages.

    Returns:
        tuple[str, int]: Regular expression class and the index after ``]``.

    Raises:
        ConfigError: If the class has no closing bracket.
    """

    index = start + 1
    negate = index < len(body) and body[index] in _NEGATION_MARKERS
    if negate:
        index += 1
    members_start = index
    # A leading ``]`` is a literal member.
    if index < len(body) and body[index] == "]":
        index += 1
    while index < len(body) and body[index] != "]":
        index += 1
    if index >= len(body):
        raise ConfigError(f"Invalid glob pattern {pattern!r}: unclosed character class")
    members = "".join(char if char == "-" else re.escape(char) for char in body[members_start:index])
    source = f"[^/{members}]" if negate else f"(?!/)[{members}]"
    return source, index + 1


def relative_form(path: PurePath, root: Path | None) -> str:
    """Return the forward-slash form of ``path`` used for matching.

    Args:
        path: Candidate path, absolute or relative.
        root: Directory that relative matching is anchored to.

    Returns:
        str: Root-relative path when ``path`` lies under ``root``; otherwise
            ``path`` itself in forward-slash form.
    """

    if root is not None and path.is_absolute():
        try:
            return path.relative_to(root).as_posix()
        except ValueError:
            return path.as_posix()
    return path.as_posix()


def _normalise_commands(pattern: str, raw: object) -> tuple[str, ...]:
    """Coerce a configuration value into an ordered tuple of commands.

    Args:
        pattern: Glob key the value belongs to, used in error messages.
        raw: Configuration value, either a string or a sequence of strings.

    Returns:
        tuple[str, ...]: Command strings in declared order.

    Raises:
        ConfigError: If ``raw`` is neither a string nor a sequence of strings,
            or a command is blank.
    """

    if isinstance(raw, str):
        commands: tuple[str, ...] = (raw,)
    elif isinstance(raw, Sequence) and not isinstance(raw, (bytes, bytearray)):
        if not all(isinstance(item, str) for item in raw):
            raise ConfigError(f"Commands for {pattern!r} must all be strings")
        commands = tuple(raw)
    else:
        raise ConfigError(
            f"Commands for {pattern!r} must be a string or a list of strings, got {type(raw).__name__}",
        )
    for command in commands:
        if not command.split():
            raise ConfigError(f"Blank command configured for {pattern!r}")
    return commands


@dataclass(frozen=True, slots=True)
class Rule:
    """One configuration entry binding a glob pattern to ordered commands."""

    pattern: str
    matcher: GlobMatcher
    commands: tuple[str, ...]

    def matches(self, path: PurePath, *, root: Path | None = None) -> bool:
        """Return whether ``path`` satisfies this rule's glob.

        Args:
            path: Candidate path.
            root: Directory relative matching is anchored to.

        Returns:
            bool: ``True`` when the rule applies to ``path``.
        """

        return self.matcher.is_match(relative_form(path, root))

    def match_all(self, paths: Iterable[Path], *, root: Path | None = None) -> list[Path]:
        """Return the subset of ``paths`` accepted by this rule, in input order.

        Args:
            paths: Candidate paths.
            root: Directory relative matching is anchored to.

        Returns:
            list[Path]: Matching paths in their original order.
        """

        return [path for path in paths if self.matches(path, root=root)]


@dataclass(frozen=True, slots=True)
class PatternSet:
    """Ordered, read-only collection of compiled rules."""

    rules: tuple[Rule, ...] = ()

    @classmethod
    def compile(cls, config: Mapping[str, object]) -> PatternSet:
        """Compile a parsed ``glob -> command(s)`` mapping.

        Args:
            config: Mapping from glob pattern to a command string or a list
                of command strings.

        Returns:
            PatternSet: Rules in configuration order.

        Raises:
            ConfigError: If ``config`` is not a mapping, a pattern does not
                parse, or a command value is malformed.
        """

        if not isinstance(config, Mapping):
            raise ConfigError(f"Configuration must be an object mapping globs to commands, got {type(config).__name__}")
        rules: list[Rule] = []
        for pattern, raw_commands in config.items():
            if not isinstance(pattern, str):
                raise ConfigError(f"Glob pattern keys must be strings, got {pattern!r}")
            rules.append(
                Rule(
                    pattern=pattern,
                    matcher=compile_glob(pattern),
                    commands=_normalise_commands(pattern, raw_commands),
                ),
            )
        return cls(rules=tuple(rules))

    def matching_files(self, paths: Iterable[Path], *, root: Path | None = None) -> list[Path]:
        """Return paths matched by at least one rule, in input order.

        Args:
            paths: Candidate paths.
            root: Directory relative matching is anchored to.

        Returns:
            list[Path]: Paths covered by the configuration.
        """

        return [path for path in paths if any(rule.matches(path, root=root) for rule in self.rules)]

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)


__all__ = ["GlobMatcher", "PatternSet", "Rule", "compile_glob", "relative_form"]
