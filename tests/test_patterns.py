# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for glob compilation and rule matching."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest

from pystaged.errors import ConfigError
from pystaged.patterns import PatternSet, compile_glob


@pytest.mark.parametrize(
    "config",
    [
        {"*.js": "eslint"},
        {"*.ts": ["prettier --write", "tsc --noEmit"], "src/**/*.py": "ruff"},
        {"**": "true", "/*.md": ["markdownlint"]},
    ],
)
def test_match_all_on_empty_sequence_is_empty(config: dict[str, object]) -> None:
    pattern_set = PatternSet.compile(config)

    for rule in pattern_set:
        assert rule.match_all([]) == []


def test_single_command_string_becomes_one_element_sequence() -> None:
    pattern_set = PatternSet.compile({"*.js": "eslint --fix", "*.css": ["stylelint", "prettier --check"]})

    commands = {rule.pattern: rule.commands for rule in pattern_set}
    assert commands == {"*.js": ("eslint --fix",), "*.css": ("stylelint", "prettier --check")}


def test_rules_keep_configuration_order() -> None:
    pattern_set = PatternSet.compile({"b/*": "b", "a/*": "a", "*.c": "c"})

    assert [rule.pattern for rule in pattern_set] == ["b/*", "a/*", "*.c"]
    assert len(pattern_set) == 3


def test_basename_pattern_matches_anywhere_in_tree(tmp_path: Path) -> None:
    rule = PatternSet.compile({"*.js": "echo"}).rules[0]
    staged = [tmp_path / "a.js", tmp_path / "b.txt", tmp_path / "src" / "deep" / "c.js"]

    assert rule.match_all(staged, root=tmp_path) == [tmp_path / "a.js", tmp_path / "src" / "deep" / "c.js"]


def test_match_all_preserves_input_order() -> None:
    rule = PatternSet.compile({"*.py": "ruff"}).rules[0]
    paths = [Path("z.py"), Path("a.py"), Path("m.txt"), Path("b.py")]

    assert rule.match_all(paths) == [Path("z.py"), Path("a.py"), Path("b.py")]


@pytest.mark.parametrize(
    ("pattern", "candidate", "expected"),
    [
        ("src/**/*.py", "src/a.py", True),
        ("src/**/*.py", "src/x/y/a.py", True),
        ("src/**/*.py", "lib/a.py", False),
        ("src/**/*.py", "a.py", False),
        ("**/*.py", "a.py", True),
        ("**/*.py", "pkg/mod/a.py", True),
        ("src/*", "src/a.py", True),
        ("src/*", "src/sub/a.py", False),
        ("src/**", "src/sub/a.py", True),
        ("*.{js,ts}", "web/app.ts", True),
        ("*.{js,ts}", "web/app.tsx", False),
        ("?.txt", "a.txt", True),
        ("?.txt", "ab.txt", False),
        ("[abc].md", "docs/b.md", True),
        ("[abc].md", "docs/d.md", False),
        ("[!abc].md", "d.md", True),
        ("[!abc].md", "a.md", False),
        ("[a-c]*.rs", "bin/cat.rs", True),
        ("/*.md", "README.md", True),
        ("/*.md", "docs/guide.md", False),
        ("./docs/*.md", "docs/guide.md", True),
        ("\\*.txt", "*.txt", True),
        ("\\*.txt", "a.txt", False),
        ("*", ".eslintrc", True),
        ("a[/]b", "a/b", False),
        ("x[+-/]y", "x/y", False),
        ("x[+-/]y", "x.y", True),
    ],
)
def test_glob_dialect(pattern: str, candidate: str, expected: bool) -> None:
    assert compile_glob(pattern).is_match(candidate) is expected


def test_absolute_and_relative_forms_match_consistently(tmp_path: Path) -> None:
    rule = PatternSet.compile({"src/**/*.py": "ruff"}).rules[0]

    assert rule.matches(tmp_path / "src" / "pkg" / "mod.py", root=tmp_path)
    assert rule.matches(PurePosixPath("src/pkg/mod.py"))
    assert not rule.matches(tmp_path / "tests" / "test_mod.py", root=tmp_path)


def test_paths_outside_root_fall_back_to_absolute_form(tmp_path: Path) -> None:
    root = tmp_path / "repo"
    outside = tmp_path / "elsewhere" / "tool.js"
    pattern_set = PatternSet.compile({"*.js": "eslint", "repo/*.js": "never"})

    assert pattern_set.rules[0].matches(outside, root=root)
    assert not pattern_set.rules[1].matches(outside, root=root)


def test_overlapping_rules_both_apply(tmp_path: Path) -> None:
    pattern_set = PatternSet.compile({"*.py": "ruff", "src/**": "codespell"})
    target = tmp_path / "src" / "main.py"

    assert all(rule.match_all([target], root=tmp_path) == [target] for rule in pattern_set)


def test_matching_files_returns_union_in_input_order(tmp_path: Path) -> None:
    pattern_set = PatternSet.compile({"*.py": "ruff", "*.md": "mdl"})
    staged = [tmp_path / "README.md", tmp_path / "setup.cfg", tmp_path / "app.py"]

    assert pattern_set.matching_files(staged, root=tmp_path) == [tmp_path / "README.md", tmp_path / "app.py"]


@pytest.mark.parametrize("pattern", ["[abc", "*.{js,ts", "{a,{b,c}}", "", "   ", "./", "trailing\\"])
def test_malformed_patterns_raise_config_error(pattern: str) -> None:
    with pytest.raises(ConfigError):
        PatternSet.compile({pattern: "echo"})


@pytest.mark.parametrize(
    "value",
    [42, None, {"cmd": "echo"}, ["eslint", 3], "   ", ["prettier", ""]],
)
def test_malformed_command_values_raise_config_error(value: object) -> None:
    with pytest.raises(ConfigError):
        PatternSet.compile({"*.js": value})


def test_non_mapping_configuration_is_rejected() -> None:
    with pytest.raises(ConfigError, match="must be an object"):
        PatternSet.compile(["*.js", "eslint"])  # type: ignore[arg-type]
