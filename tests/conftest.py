"""Pytest configuration for BugDesk tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install (`pip install -e .`).
"""

from __future__ import annotations

import itertools
import sys
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import bugdesk.logging as bugdesk_logging  # noqa: E402
import bugdesk.ux as bugdesk_ux  # noqa: E402
from bugdesk.models import Bug  # noqa: E402
from bugdesk.storage import BugRepository, MemoryStorage  # noqa: E402
from bugdesk.store import BugStore  # noqa: E402

START = datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 1.0) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


class FailingStorage(MemoryStorage):
    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = True

    def set_item(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        super().set_item(key, value)


def make_bug(
    bug_id: str,
    *,
    title: str = "Bug",
    description: str = "Something broke",
    priority: str = "Medium",
    status: str = "Open",
    assigned_to: str = "John Doe",
    created_at: datetime = START,
) -> Bug:
    return Bug(
        id=bug_id,
        title=title,
        description=description,
        priority=priority,
        status=status,
        assigned_to=assigned_to,
        created_by="Jane Smith",
        created_at=created_at,
        updated_at=created_at,
    )


@pytest.fixture(autouse=True)
def fresh_logger(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset process-wide logger and color state between tests."""
    monkeypatch.setattr(bugdesk_logging, "_GLOBAL", None)
    monkeypatch.setattr(bugdesk_ux, "_color_enabled", True)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def ids() -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def store(storage: MemoryStorage, clock: FrozenClock, ids: Callable[[], str]) -> BugStore:
    """Initialized, empty store (seeding disabled)."""
    return BugStore(
        BugRepository(storage), seed=None, clock=clock, id_factory=ids, author="Tester"
    ).initialize_blocking()
