"""Filtering and dashboard aggregates over a bug collection.

All functions are pure: the input sequence is never mutated or reordered.
Sorting relies on Python's stable ``sorted`` so ties keep encounter order.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .models import ALL, PRIORITIES, STATUSES, Bug, BugFilters

DEFAULT_TOP = 5


def matches(bug: Bug, filters: BugFilters) -> bool:
    if filters.status != ALL and bug.status != filters.status:
        return False
    if filters.priority != ALL and bug.priority != filters.priority:
        return False
    if filters.assigned_to and bug.assigned_to != filters.assigned_to:
        return False
    if filters.search:
        needle = filters.search.lower()
        return needle in bug.title.lower() or needle in bug.description.lower()
    return True


def filtered_bugs(bugs: Iterable[Bug], filters: BugFilters) -> list[Bug]:
    return [bug for bug in bugs if matches(bug, filters)]


@dataclass(frozen=True)
class BugStats:
    total: int
    by_status: dict[str, int] = field(default_factory=dict)
    by_priority: dict[str, int] = field(default_factory=dict)

    @property
    def open(self) -> int:
        return self.by_status["Open"]

    @property
    def in_progress(self) -> int:
        return self.by_status["In Progress"]

    @property
    def resolved(self) -> int:
        return self.by_status["Resolved"]

    @property
    def closed(self) -> int:
        return self.by_status["Closed"]

    @property
    def critical(self) -> int:
        return self.by_priority["Critical"]

    @property
    def high(self) -> int:
        return self.by_priority["High"]

    @property
    def medium(self) -> int:
        return self.by_priority["Medium"]

    @property
    def low(self) -> int:
        return self.by_priority["Low"]


def stats(bugs: Sequence[Bug]) -> BugStats:
    by_status = {s: 0 for s in STATUSES}
    by_priority = {p: 0 for p in PRIORITIES}
    for bug in bugs:
        by_status[bug.status] = by_status.get(bug.status, 0) + 1
        by_priority[bug.priority] = by_priority.get(bug.priority, 0) + 1
    return BugStats(total=len(bugs), by_status=by_status, by_priority=by_priority)


def share(count: int, total: int) -> float:
    """Percentage of ``total``; 0.0 for an empty collection."""
    if total <= 0:
        return 0.0
    return count / total * 100


def top_assignees(bugs: Iterable[Bug], k: int = DEFAULT_TOP) -> list[tuple[str, int]]:
    counts: dict[str, int] = {}
    for bug in bugs:
        counts[bug.assigned_to] = counts.get(bug.assigned_to, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return ranked[: max(0, k)]


def recent_bugs(bugs: Iterable[Bug], k: int = DEFAULT_TOP) -> list[Bug]:
    ranked = sorted(bugs, key=lambda bug: bug.created_at, reverse=True)
    return ranked[: max(0, k)]


def assignees(bugs: Iterable[Bug]) -> list[str]:
    seen: dict[str, None] = {}
    for bug in bugs:
        if bug.assigned_to:
            seen.setdefault(bug.assigned_to, None)
    return list(seen)


__all__ = [
    "BugStats",
    "DEFAULT_TOP",
    "assignees",
    "filtered_bugs",
    "matches",
    "recent_bugs",
    "share",
    "stats",
    "top_assignees",
]
