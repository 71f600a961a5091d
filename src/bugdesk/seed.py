"""Demo data for a first run with empty storage."""

from __future__ import annotations

import random
import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from .models import PRIORITIES, STATUSES, Bug, Comment

MOCK_USERS: tuple[str, ...] = (
    "John Doe",
    "Jane Smith",
    "Mike Johnson",
    "Sarah Wilson",
    "David Brown",
)

_TITLES = (
    "Login button not responding on mobile",
    "Dashboard charts render blank after refresh",
    "Search returns stale results",
    "Password reset email never arrives",
    "Export to CSV drops the last row",
    "Dark mode toggle resets on reload",
    "Notifications badge shows wrong count",
    "File upload fails for names with spaces",
    "Pagination skips the second page",
    "Session expires while typing a comment",
)

_DESCRIPTIONS = (
    "Reproducible on the latest build. Steps are listed in the linked report.",
    "Happens intermittently, roughly one attempt in five.",
    "Started after the last deploy; no errors in the console.",
    "Affects every user on the staging environment.",
    "Only reproducible with a slow network connection.",
)

_COMMENTS = (
    "I can reproduce this locally.",
    "Looking into it now.",
    "Might be related to the caching change.",
    "Fix is in review.",
)

DEFAULT_SEED_COUNT = 8


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


def generate_seed_bugs(
    *,
    count: int = DEFAULT_SEED_COUNT,
    rng: random.Random | None = None,
    clock: Callable[[], datetime] | None = None,
    id_factory: Callable[[], str] | None = None,
) -> list[Bug]:
    """Build ``count`` demo bugs with random content.

    Statuses cycle in order; priorities cycle in reverse with a shift per
    round, so ``count >= 4`` covers every status and every priority and
    ``count >= 16`` covers every status/priority pair.
    """
    rng = rng or random.Random()
    clock = clock or _utc_now
    id_factory = id_factory or _new_id
    bugs: list[Bug] = []
    for i in range(max(0, count)):
        stamp = clock()
        comments = [
            Comment(
                id=id_factory(),
                text=rng.choice(_COMMENTS),
                author=rng.choice(MOCK_USERS),
                created_at=stamp,
            )
            for _ in range(rng.randint(0, 2))
        ]
        bugs.append(
            Bug(
                id=id_factory(),
                title=rng.choice(_TITLES),
                description=rng.choice(_DESCRIPTIONS),
                priority=PRIORITIES[-1 - ((i + i // len(STATUSES)) % len(PRIORITIES))],
                status=STATUSES[i % len(STATUSES)],
                assigned_to=rng.choice(MOCK_USERS),
                created_by=rng.choice(MOCK_USERS),
                created_at=stamp,
                updated_at=stamp,
                comments=comments,
            )
        )
    return bugs


__all__ = ["DEFAULT_SEED_COUNT", "MOCK_USERS", "generate_seed_bugs"]
