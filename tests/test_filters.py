from __future__ import annotations

from datetime import timedelta

import pytest

from bugdesk.filters import (
    assignees,
    filtered_bugs,
    recent_bugs,
    share,
    stats,
    top_assignees,
)
from bugdesk.models import PRIORITIES, STATUSES, BugFilters
from conftest import START, make_bug


@pytest.fixture
def scenario():
    return [
        make_bug("1", priority="Critical", status="Open", title="Login crash"),
        make_bug("2", priority="Low", status="Open", assigned_to="Jane Smith"),
        make_bug("3", priority="High", status="Resolved", description="Search is SLOW"),
    ]


def test_priority_filter_scenario(scenario) -> None:
    result = filtered_bugs(scenario, BugFilters(priority="Critical"))
    assert [b.id for b in result] == ["1"]


def test_stats_scenario(scenario) -> None:
    summary = stats(scenario)
    assert summary.total == 3
    assert (summary.open, summary.resolved) == (2, 1)
    assert (summary.critical, summary.high, summary.low) == (1, 1, 1)
    assert summary.in_progress == 0
    assert summary.medium == 0


def test_default_filters_return_input_unchanged(scenario) -> None:
    result = filtered_bugs(scenario, BugFilters())
    assert result == scenario
    assert result is not scenario


def test_filters_are_conjunctive(scenario) -> None:
    result = filtered_bugs(scenario, BugFilters(status="Open", assigned_to="Jane Smith"))
    assert [b.id for b in result] == ["2"]
    assert filtered_bugs(scenario, BugFilters(status="Resolved", priority="Low")) == []


def test_search_is_case_insensitive_over_title_and_description(scenario) -> None:
    assert [b.id for b in filtered_bugs(scenario, BugFilters(search="LOGIN"))] == ["1"]
    assert [b.id for b in filtered_bugs(scenario, BugFilters(search="slow"))] == ["3"]


def test_filter_result_is_subset(scenario) -> None:
    for status in ("All", *STATUSES):
        result = filtered_bugs(scenario, BugFilters(status=status, search="o"))
        assert all(b in scenario for b in result)


def test_stats_empty_reports_zero_for_every_category() -> None:
    summary = stats([])
    assert summary.total == 0
    assert summary.by_status == {s: 0 for s in STATUSES}
    assert summary.by_priority == {p: 0 for p in PRIORITIES}


def test_stats_totals_match_collection(scenario) -> None:
    bugs = scenario + [make_bug("4", status="Closed"), make_bug("5", status="In Progress")]
    summary = stats(bugs)
    assert sum(summary.by_status.values()) == len(bugs)
    assert sum(summary.by_priority.values()) == len(bugs)


def test_top_assignees_stable_on_ties() -> None:
    bugs = [
        make_bug("1", assigned_to="Mike"),
        make_bug("2", assigned_to="Anna"),
        make_bug("3", assigned_to="Zoe"),
        make_bug("4", assigned_to="Zoe"),
        make_bug("5", assigned_to="Anna"),
        make_bug("6", assigned_to="Bob"),
    ]
    assert top_assignees(bugs) == [("Anna", 2), ("Zoe", 2), ("Mike", 1), ("Bob", 1)]
    assert top_assignees(bugs, k=1) == [("Anna", 2)]


def test_recent_bugs_newest_first_with_stable_ties() -> None:
    bugs = [
        make_bug("old", created_at=START),
        make_bug("tie-a", created_at=START + timedelta(hours=1)),
        make_bug("new", created_at=START + timedelta(hours=2)),
        make_bug("tie-b", created_at=START + timedelta(hours=1)),
    ]
    assert [b.id for b in recent_bugs(bugs)] == ["new", "tie-a", "tie-b", "old"]
    assert [b.id for b in recent_bugs(bugs, k=2)] == ["new", "tie-a"]
    assert [b.id for b in bugs] == ["old", "tie-a", "new", "tie-b"]


def test_share_handles_empty_total() -> None:
    assert share(0, 0) == 0.0
    assert share(1, 4) == 25.0


def test_assignees_first_seen_order(scenario) -> None:
    assert assignees(scenario) == ["John Doe", "Jane Smith"]
