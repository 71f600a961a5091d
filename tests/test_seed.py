from __future__ import annotations

import random
from datetime import datetime, timezone

from bugdesk.models import PRIORITIES, STATUSES
from bugdesk.seed import MOCK_USERS, generate_seed_bugs


def test_default_seed_covers_every_status_and_priority() -> None:
    bugs = generate_seed_bugs(rng=random.Random(7))
    assert len(bugs) == 8
    assert {b.status for b in bugs} == set(STATUSES)
    assert {b.priority for b in bugs} == set(PRIORITIES)


def test_sixteen_bugs_cover_every_combination() -> None:
    bugs = generate_seed_bugs(count=16, rng=random.Random(1))
    pairs = {(b.status, b.priority) for b in bugs}
    assert len(pairs) == len(STATUSES) * len(PRIORITIES)


def test_seed_ids_are_unique_and_timestamps_not_before_start() -> None:
    start = datetime.now(timezone.utc)
    bugs = generate_seed_bugs(count=10)
    ids = [b.id for b in bugs] + [c.id for b in bugs for c in b.comments]
    assert len(ids) == len(set(ids))
    for bug in bugs:
        assert bug.created_at >= start
        assert bug.updated_at >= bug.created_at
        assert bug.assigned_to in MOCK_USERS


def test_seed_uses_injected_clock_and_ids() -> None:
    stamp = datetime(2030, 1, 1, tzinfo=timezone.utc)
    counter = iter(range(1000))
    bugs = generate_seed_bugs(
        count=3, rng=random.Random(3), clock=lambda: stamp, id_factory=lambda: f"s{next(counter)}"
    )
    assert all(b.created_at == stamp for b in bugs)
    assert all(b.id.startswith("s") for b in bugs)


def test_zero_count_produces_nothing() -> None:
    assert generate_seed_bugs(count=0) == []
