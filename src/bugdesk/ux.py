"""Terminal rendering helpers for the BugDesk CLI."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import TextIO

from .models import Bug


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BRIGHT_BLACK = "\033[90m"
    BRIGHT_RED = "\033[91m"


PRIORITY_COLORS = {
    "Low": Colors.GREEN,
    "Medium": Colors.YELLOW,
    "High": Colors.BRIGHT_RED,
    "Critical": Colors.RED,
}

STATUS_COLORS = {
    "Open": Colors.BLUE,
    "In Progress": Colors.MAGENTA,
    "Resolved": Colors.GREEN,
    "Closed": Colors.BRIGHT_BLACK,
}


_color_enabled = True


def set_color_enabled(enabled: bool) -> None:
    """Globally allow or forbid ANSI colors (off for `--quiet`)."""
    global _color_enabled
    _color_enabled = enabled


def _supports_color(stream: TextIO | None = None) -> bool:
    stream = stream or sys.stdout
    if not _color_enabled or os.environ.get("NO_COLOR"):
        return False
    if not hasattr(stream, "isatty") or not stream.isatty():
        return False
    return os.environ.get("TERM") != "dumb"


def colorize(text: str, color: str, bold: bool = False, stream: TextIO | None = None) -> str:
    """Apply color to text if terminal supports it."""
    if not _supports_color(stream):
        return text
    prefix = (Colors.BOLD if bold else "") + color
    return f"{prefix}{text}{Colors.RESET}"


def print_success(message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    print(colorize("✓", Colors.GREEN, bold=True, stream=stream) + " " + message, file=stream)


def print_error(message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stderr
    print(colorize("✗", Colors.RED, bold=True, stream=stream) + " " + message, file=stream)


def print_header(message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    print(colorize(message, Colors.CYAN, bold=True, stream=stream), file=stream)


def print_summary_box(
    title: str, items: Sequence[tuple[str, str | int]], stream: TextIO | None = None
) -> None:
    """Print a formatted summary box with key-value pairs."""
    stream = stream or sys.stdout
    max_key_len = max((len(k) for k, _ in items), default=0)

    print(colorize(f"\n{title}", Colors.CYAN, bold=True, stream=stream), file=stream)
    print(colorize("─" * 60, Colors.DIM, stream=stream), file=stream)
    for key, value in items:
        value_str = str(value)
        if isinstance(value, int) and value > 0:
            value_str = colorize(value_str, Colors.GREEN, bold=True, stream=stream)
        print(f"  {key.ljust(max_key_len)}  {value_str}", file=stream)
    print(colorize("─" * 60, Colors.DIM, stream=stream), file=stream)


def bar(percent: float, width: int = 20) -> str:
    filled = round(max(0.0, min(100.0, percent)) / 100 * width)
    return "█" * filled + "░" * (width - filled)


def format_relative(moment: datetime, now: datetime | None = None) -> str:
    """Human distance such as ``"3 minutes ago"`` or ``"in 2 days"``."""
    now = now or datetime.now(timezone.utc)
    seconds = (now - moment).total_seconds()
    future = seconds < 0
    seconds = abs(seconds)
    if seconds < 45:
        text = "less than a minute"
    else:
        minutes = round(seconds / 60)
        hours = round(seconds / 3600)
        days = round(seconds / 86400)
        if minutes < 45:
            text = f"{minutes} minute" + ("s" if minutes != 1 else "")
        elif hours < 24:
            text = "about " + (f"{hours} hours" if hours != 1 else "1 hour")
        elif days < 30:
            text = f"{days} day" + ("s" if days != 1 else "")
        elif days < 365:
            months = round(days / 30)
            text = f"{months} month" + ("s" if months != 1 else "")
        else:
            years = round(days / 365)
            text = f"about {years} year" + ("s" if years != 1 else "")
    return f"in {text}" if future else f"{text} ago"


def format_bug_line(bug: Bug, stream: TextIO | None = None, now: datetime | None = None) -> str:
    short_id = colorize(bug.id[:8], Colors.CYAN, bold=True, stream=stream)
    priority = colorize(f"{bug.priority:<8}", PRIORITY_COLORS[bug.priority], stream=stream)
    status = colorize(f"{bug.status:<11}", STATUS_COLORS[bug.status], stream=stream)
    age = colorize(format_relative(bug.created_at, now), Colors.DIM, stream=stream)
    assignee = bug.assigned_to or "unassigned"
    return f"  {short_id} {priority} {status} {bug.title[:60]} ({assignee}, {age})"


__all__ = [
    "Colors",
    "PRIORITY_COLORS",
    "STATUS_COLORS",
    "bar",
    "colorize",
    "format_bug_line",
    "format_relative",
    "print_error",
    "print_header",
    "print_success",
    "print_summary_box",
    "set_color_enabled",
]
