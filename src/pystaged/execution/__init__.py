# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command dispatch over compiled rules."""

from __future__ import annotations

from .dispatcher import (
    CommandInvocation,
    CommandResult,
    CommandStatus,
    DispatchReport,
    Dispatcher,
    split_command,
)

__all__ = [
    "CommandInvocation",
    "CommandResult",
    "CommandStatus",
    "DispatchReport",
    "Dispatcher",
    "split_command",
]
