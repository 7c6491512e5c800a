# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run orchestration package."""

from __future__ import annotations

from .orchestrator import Orchestrator, RunOutcome

__all__ = ["Orchestrator", "RunOutcome"]
