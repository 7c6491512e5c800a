# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing logging handle with optional colour and emoji support."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from typing import Final, Literal

from rich.console import Console
from rich.rule import Rule
from rich.text import Text

_KEY_VALUE_RE: Final[re.Pattern[str]] = re.compile(r"([\w-]+)=(\".*?\"|\S+)")


def detect_tty() -> bool:
    """Return ``True`` when stdout appears to be backed by a terminal.

    Returns:
        bool: ``True`` when ``sys.stdout`` reports TTY support, ``False`` otherwise.
    """

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


def emoji(symbol: str, enable: bool) -> str:
    """Select an emoji symbol based on the caller's preference.

    Args:
        symbol: Emoji text to include in the output.
        enable: Flag indicating whether emoji output is desired.

    Returns:
        str: Emoji symbol when enabled, otherwise an empty string.
    """

    return symbol if enable else ""


@dataclass(slots=True)
class ConsoleLogger:
    """Logging handle passed explicitly to every component that reports progress.

    The handle owns its Rich console, so two loggers never share output
    state and no module-level logger exists.
    """

    console: Console
    use_emoji: bool = True
    use_color: bool = True
    debug_enabled: bool = False
    _prefixes: dict[str, str] = field(
        default_factory=lambda: {"info": "ℹ️ ", "ok": "✅ ", "warn": "⚠️ ", "fail": "❌ "},
    )

    def _print_line(self, msg: str, *, level: str, style: str) -> None:
        prefix = emoji(self._prefixes[level], self.use_emoji)
        text = Text(f"{prefix}{msg}")
        if self.use_color:
            text.stylize(style)
        self.console.print(text)

    def info(self, message: str) -> None:
        """Emit an informational message."""

        self._print_line(message, level="info", style="cyan")

    def ok(self, message: str) -> None:
        """Emit a success message."""

        self._print_line(message, level="ok", style="green")

    def warn(self, message: str) -> None:
        """Emit a warning message."""

        self._print_line(message, level="warn", style="yellow")

    def fail(self, message: str) -> None:
        """Emit an error message."""

        self._print_line(message, level="fail", style="red")

    def section(self, title: str) -> None:
        """Render a section header to delineate console output blocks.

        Args:
            title: Section title displayed to the user.
        """

        if self.use_color:
            self.console.print()
            self.console.print(Rule(title))
        else:
            self.console.print(f"\n--- {title} ---")

    def echo(self, message: str) -> None:
        """Write ``message`` verbatim without markup or highlighting.

        Args:
            message: Text written to the console.
        """

        self.console.print(Text(message))

    def debug(self, message: str) -> None:
        """Emit a debug message when debug logging is enabled.

        ``key=value`` pairs inside ``message`` are highlighted.

        Args:
            message: Debug payload rendered with simple highlighting.
        """

        if not self.debug_enabled:
            return
        text = Text("[debug] ", style="bold cyan")
        cursor = 0
        for match in _KEY_VALUE_RE.finditer(message):
            start, end = match.span()
            if start > cursor:
                text.append(message[cursor:start], style="dim")
            key, raw_value = match.group(1), match.group(2)
            text.append(key, style="bold magenta")
            text.append("=", style="dim")
            value_style = "bold blue" if key in {"command", "cmd", "argv"} else "bold green"
            text.append(raw_value, style=value_style)
            cursor = end
        if cursor < len(message):
            text.append(message[cursor:], style="dim")
        if not self.use_color:
            text = Text(text.plain)
        self.console.print(text)


def build_logger(
    *,
    emoji: bool = True,
    color: bool = True,
    debug: bool = False,
    stderr: bool = False,
) -> ConsoleLogger:
    """Return a ``ConsoleLogger`` bound to a dedicated Rich console.

    Args:
        emoji: Whether log output may include emoji glyphs.
        color: Whether colour output is requested; ignored when not on a TTY.
        debug: Whether debug logging should be enabled.
        stderr: Whether the console writes to standard error.

    Returns:
        ConsoleLogger: Logger instance owning its console.
    """

    tty = detect_tty()
    color_enabled = color and tty
    color_system: Literal["auto"] | None = "auto" if color_enabled else None
    console = Console(
        color_system=color_system,
        no_color=not color_enabled,
        emoji=emoji,
        highlight=False,
        soft_wrap=True,
        stderr=stderr,
    )
    return ConsoleLogger(console=console, use_emoji=emoji, use_color=color_enabled, debug_enabled=debug)


__all__ = ["ConsoleLogger", "build_logger", "detect_tty", "emoji"]
