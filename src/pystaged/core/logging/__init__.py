# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Console logging handle used by the orchestrator and dispatcher."""

from __future__ import annotations

from .public import ConsoleLogger, build_logger, detect_tty, emoji

__all__ = [
    "ConsoleLogger",
    "build_logger",
    "detect_tty",
    "emoji",
]
