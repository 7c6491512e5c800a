# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Staged file discovery backed by git."""

from __future__ import annotations

from .git import GitRunner, Repository, StagedFileLocator, decode_git_output, dedupe_paths, parse_name_status

__all__ = [
    "GitRunner",
    "Repository",
    "StagedFileLocator",
    "decode_git_output",
    "dedupe_paths",
    "parse_name_status",
]
