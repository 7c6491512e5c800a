# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Summary rendering for completed runs."""

from __future__ import annotations

from rich.table import Table

from ..core.logging import ConsoleLogger
from ..orchestration.orchestrator import RunOutcome


def build_failure_table(outcome: RunOutcome) -> Table:
    """Return a table listing every failed rule/command pair.

    Args:
        outcome: Completed run containing a dispatch report.

    Returns:
        Table: Rich table with pattern, command, and reason columns.
    """

    table = Table(title="Failed commands", show_lines=False, expand=False)
    table.add_column("Pattern", style="magenta", no_wrap=True)
    table.add_column("Command", style="bold")
    table.add_column("Reason", style="red")
    failures = outcome.report.failures if outcome.report is not None else ()
    for result in failures:
        table.add_row(result.pattern, result.command, str(result.error))
    return table


def emit_summary(outcome: RunOutcome, *, logger: ConsoleLogger) -> None:
    """Print the closing summary for ``outcome``.

    Args:
        outcome: Completed run.
        logger: Logging handle used for output.
    """

    report = outcome.report
    if report is None:
        logger.debug("summary staged=0")
        return
    if not report.results:
        logger.warn("No rules configured; nothing to run.")
        return
    if report.spawned == 0:
        logger.info(f"No staged files matched any rule ({len(outcome.staged)} staged).")
        return
    if report.succeeded:
        logger.ok(f"{report.spawned} command{'s' if report.spawned != 1 else ''} passed.")
        return
    logger.section("Summary")
    logger.console.print(build_failure_table(outcome))
    logger.fail(f"{len(report.failures)} of {report.spawned} commands failed.")


__all__ = ["build_failure_table", "emit_summary"]
