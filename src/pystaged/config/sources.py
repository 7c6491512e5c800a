# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Concrete rule configuration sources (package.json, JSON rc file, pyproject)."""

from __future__ import annotations

import json
import tomllib
from abc import abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Protocol, runtime_checkable

from ..errors import ConfigError

PACKAGE_JSON_FILENAME: Final[str] = "package.json"
PACKAGE_JSON_KEY: Final[str] = "lint-staged"
RC_FILENAME: Final[str] = ".lintstagedrc.json"
PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "pystaged"

RuleMapping = Mapping[str, Any]


@runtime_checkable
class ConfigSource(Protocol):
    """Provide a parsed ``glob -> command(s)`` mapping from some medium."""

    name: str

    @abstractmethod
    def load(self) -> RuleMapping | None:
        """Return the rule mapping, or ``None`` when this source has none."""

    @abstractmethod
    def describe(self) -> str:
        """Return a human-readable description of the source."""


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Unable to read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc


def _require_mapping(value: Any, where: str) -> RuleMapping:
    if not isinstance(value, Mapping):
        raise ConfigError(f"{where} must be an object mapping globs to commands")
    return value


class PackageJsonConfigSource:
    """Read the ``"lint-staged"`` object embedded in ``package.json``."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self.name = str(path)

    def load(self) -> RuleMapping | None:
        if not self._path.is_file():
            return None
        document = _read_json(self._path)
        if not isinstance(document, Mapping) or PACKAGE_JSON_KEY not in document:
            return None
        return _require_mapping(document[PACKAGE_JSON_KEY], f'"{PACKAGE_JSON_KEY}" in {self._path}')

    def describe(self) -> str:
        return f'"{PACKAGE_JSON_KEY}" in {self.name}'


class JsonConfigSource:
    """Read a dedicated JSON file whose whole document is the rule mapping."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self.name = str(path)

    def load(self) -> RuleMapping | None:
        if not self._path.is_file():
            return None
        return _require_mapping(_read_json(self._path), str(self._path))

    def describe(self) -> str:
        return f"JSON configuration at {self.name}"


class PyProjectConfigSource:
    """Read rules from ``[tool.pystaged]`` within ``pyproject.toml``."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self.name = str(path)

    def load(self) -> RuleMapping | None:
        if not self._path.is_file():
            return None
        try:
            with self._path.open("rb") as handle:
                data = tomllib.load(handle)
        except OSError as exc:
            raise ConfigError(f"Unable to read {self._path}: {exc}") from exc
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {self._path}: {exc}") from exc
        tool_section = data.get(PYPROJECT_TOOL_KEY)
        if not isinstance(tool_section, Mapping) or PYPROJECT_SECTION_KEY not in tool_section:
            return None
        where = f"[{PYPROJECT_TOOL_KEY}.{PYPROJECT_SECTION_KEY}] in {self._path}"
        return _require_mapping(tool_section[PYPROJECT_SECTION_KEY], where)

    def describe(self) -> str:
        return f"pyproject.toml ({self.name})"


@dataclass(frozen=True, slots=True)
class LoadedConfig:
    """Rule mapping together with the source that supplied it."""

    source: ConfigSource
    rules: RuleMapping


def default_sources(root: Path) -> list[ConfigSource]:
    """Return the discovery chain searched in ``root``, highest precedence first.

    Args:
        root: Directory containing the configuration files.

    Returns:
        list[ConfigSource]: Sources in lookup order.
    """

    return [
        PackageJsonConfigSource(root / PACKAGE_JSON_FILENAME),
        JsonConfigSource(root / RC_FILENAME),
        PyProjectConfigSource(root / PYPROJECT_FILENAME),
    ]


def source_for_path(path: Path) -> ConfigSource:
    """Return the source able to read an explicitly requested file.

    Args:
        path: Configuration file named on the command line.

    Returns:
        ConfigSource: Source matching the file name and suffix.
    """

    if path.name == PACKAGE_JSON_FILENAME:
        return PackageJsonConfigSource(path)
    if path.suffix == ".toml":
        return PyProjectConfigSource(path)
    return JsonConfigSource(path)


def resolve_config(sources: Sequence[ConfigSource]) -> LoadedConfig:
    """Return the first mapping supplied by ``sources``.

    Args:
        sources: Sources in precedence order.

    Returns:
        LoadedConfig: Winning mapping and its source.

    Raises:
        ConfigError: If no source provides a mapping, or a source is malformed.
    """

    for source in sources:
        rules = source.load()
        if rules is not None:
            return LoadedConfig(source=source, rules=rules)
    searched = ", ".join(source.describe() for source in sources)
    raise ConfigError(f"No lint-staged configuration found (searched: {searched})")


def load_config(root: Path, *, config_path: Path | None = None) -> LoadedConfig:
    """Locate and parse the rule mapping for ``root``.

    Args:
        root: Invocation directory searched for configuration files.
        config_path: Explicit configuration file overriding discovery.
            Relative paths are resolved against ``root``.

    Returns:
        LoadedConfig: Parsed mapping and its source.

    Raises:
        ConfigError: If no configuration is found or it cannot be parsed.
    """

    if config_path is not None:
        candidate = config_path if config_path.is_absolute() else root / config_path
        if not candidate.is_file():
            raise ConfigError(f"Configuration file not found: {candidate}")
        return resolve_config([source_for_path(candidate)])
    return resolve_config(default_sources(root))


__all__ = [
    "ConfigSource",
    "JsonConfigSource",
    "LoadedConfig",
    "PackageJsonConfigSource",
    "PyProjectConfigSource",
    "default_sources",
    "load_config",
    "resolve_config",
    "source_for_path",
]
