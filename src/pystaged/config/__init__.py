# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rule configuration discovery and run settings."""

from __future__ import annotations

from .models import RunSettings, default_parallel_jobs
from .sources import (
    ConfigSource,
    JsonConfigSource,
    LoadedConfig,
    PackageJsonConfigSource,
    PyProjectConfigSource,
    load_config,
)

__all__ = [
    "ConfigSource",
    "JsonConfigSource",
    "LoadedConfig",
    "PackageJsonConfigSource",
    "PyProjectConfigSource",
    "RunSettings",
    "default_parallel_jobs",
    "load_config",
]
