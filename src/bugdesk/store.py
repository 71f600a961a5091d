"""In-memory bug store backed by a :class:`BugRepository`.

The store owns every Bug and Comment instance. Each mutation updates the
in-memory mapping and then writes the whole collection back through the
repository before returning, so the persisted snapshot never lags behind
what a caller can observe.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone
from typing import Any

from opentelemetry import trace

from .errors import StoreNotReadyError, ValidationError
from .logging import StructuredLogger, get_logger
from .models import (
    DEFAULT_STATUS,
    PRIORITIES,
    STATUSES,
    Bug,
    BugFormData,
    Comment,
    is_valid_priority,
    is_valid_status,
)
from .seed import generate_seed_bugs
from .storage import BugRepository, SaveResult

_tracer = trace.get_tracer(__name__)

UPDATABLE_FIELDS = frozenset({"title", "description", "priority", "status", "assigned_to"})
TITLE_REQUIRED = "Title is required"
DESCRIPTION_REQUIRED = "Description is required"
DEFAULT_AUTHOR = "Current User"

_TICK = timedelta(microseconds=1)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


def validate_form(form: BugFormData) -> None:
    """Raise ValidationError with per-field messages for a bad form."""
    errors: dict[str, str] = {}
    if not form.title.strip():
        errors["title"] = TITLE_REQUIRED
    if not form.description.strip():
        errors["description"] = DESCRIPTION_REQUIRED
    if not is_valid_priority(form.priority):
        errors["priority"] = f"Priority must be one of: {', '.join(PRIORITIES)}"
    if errors:
        raise ValidationError(errors)


def _validate_changes(changes: dict[str, Any]) -> None:
    errors: dict[str, str] = {}
    unknown = sorted(set(changes) - UPDATABLE_FIELDS)
    if unknown:
        errors["fields"] = f"Unknown fields: {', '.join(unknown)}"
    if "title" in changes and not str(changes["title"]).strip():
        errors["title"] = TITLE_REQUIRED
    if "description" in changes and not str(changes["description"]).strip():
        errors["description"] = DESCRIPTION_REQUIRED
    if "priority" in changes and not is_valid_priority(changes["priority"]):
        errors["priority"] = f"Priority must be one of: {', '.join(PRIORITIES)}"
    if "status" in changes and not is_valid_status(changes["status"]):
        errors["status"] = f"Status must be one of: {', '.join(STATUSES)}"
    if errors:
        raise ValidationError(errors)


class BugStore:
    def __init__(
        self,
        repository: BugRepository,
        *,
        seed: Callable[[], list[Bug]] | None = generate_seed_bugs,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = _new_id,
        author: str = DEFAULT_AUTHOR,
        structured_logger: StructuredLogger | None = None,
    ) -> None:
        self._repository = repository
        self._seed = seed
        self._clock = clock
        self._id_factory = id_factory
        self.author = author
        self._logger = structured_logger or get_logger()
        self._bugs: dict[str, Bug] = {}
        self._issued_ids: set[str] = set()
        self.loading = True
        self.seeded = False
        self.last_save: SaveResult | None = None
        self._load_task: asyncio.Future[None] | None = None

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------
    async def initialize(self) -> None:
        """Load persisted bugs (or seed demo data) and clear ``loading``.

        Overlapping calls share one in-flight load.
        """
        if not self.loading:
            return
        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self._load())
        try:
            await self._load_task
        except Exception:
            self._load_task = None
            raise

    async def _load(self) -> None:
        loop = asyncio.get_running_loop()
        with self._logger.timed_operation("store_load"):
            bugs = await loop.run_in_executor(None, self._repository.load)
            if not bugs and self._seed is not None:
                bugs = self._seed()
                self.seeded = True
            self._bugs = {bug.id: bug for bug in bugs}
            self._issued_ids = set(self._bugs)
            if self.seeded:
                self._persist()
        self.loading = False
        self._logger.log_operation("store_ready", bugs=len(self._bugs), seeded=self.seeded)

    def initialize_blocking(self) -> BugStore:
        asyncio.run(self.initialize())
        return self

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def bugs(self) -> list[Bug]:
        self._ensure_ready()
        return list(self._bugs.values())

    def __len__(self) -> int:
        return len(self._bugs)

    def __contains__(self, bug_id: object) -> bool:
        return bug_id in self._bugs

    def __iter__(self) -> Iterator[Bug]:
        return iter(self.bugs)

    def get_bug_by_id(self, bug_id: str) -> Bug | None:
        self._ensure_ready()
        return self._bugs.get(bug_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def create_bug(self, form: BugFormData) -> Bug:
        self._ensure_ready()
        with _tracer.start_as_current_span("bugdesk.store.create") as span:
            validate_form(form)
            now = self._clock()
            bug = Bug(
                id=self._fresh_id(self._issued_ids),
                title=form.title.strip(),
                description=form.description.strip(),
                priority=form.priority,
                status=DEFAULT_STATUS,
                assigned_to=form.assigned_to,
                created_by=self.author,
                created_at=now,
                updated_at=now,
            )
            self._bugs[bug.id] = bug
            span.set_attribute("bugdesk.bug_id", bug.id)
            self._persist()
        self._logger.log_bug_action("create", bug.id, priority=bug.priority)
        return bug

    def update_bug(self, bug_id: str, **changes: Any) -> Bug | None:
        """Merge ``changes`` into an existing bug; ``None`` if the id is unknown."""
        self._ensure_ready()
        with _tracer.start_as_current_span("bugdesk.store.update") as span:
            span.set_attribute("bugdesk.bug_id", bug_id)
            bug = self._bugs.get(bug_id)
            if bug is None:
                span.set_attribute("bugdesk.found", False)
                return None
            _validate_changes(changes)
            for name, value in changes.items():
                if name in ("title", "description"):
                    value = str(value).strip()
                setattr(bug, name, value)
            self._touch(bug)
            self._persist()
        self._logger.log_bug_action("update", bug_id, fields=sorted(changes))
        return bug

    def update_status(self, bug_id: str, status: str) -> Bug | None:
        # Any status may follow any other
        return self.update_bug(bug_id, status=status)

    def apply_form(self, bug_id: str, form: BugFormData) -> Bug | None:
        self._ensure_ready()
        if bug_id not in self._bugs:
            return None
        validate_form(form)
        return self.update_bug(
            bug_id,
            title=form.title,
            description=form.description,
            priority=form.priority,
            assigned_to=form.assigned_to,
        )

    def delete_bug(self, bug_id: str) -> bool:
        self._ensure_ready()
        with _tracer.start_as_current_span("bugdesk.store.delete") as span:
            span.set_attribute("bugdesk.bug_id", bug_id)
            removed = self._bugs.pop(bug_id, None) is not None
            span.set_attribute("bugdesk.found", removed)
            self._persist()
        if removed:
            self._logger.log_bug_action("delete", bug_id)
        return removed

    def add_comment(self, bug_id: str, text: str, author: str | None = None) -> Comment | None:
        self._ensure_ready()
        body = text.strip()
        with _tracer.start_as_current_span("bugdesk.store.comment") as span:
            span.set_attribute("bugdesk.bug_id", bug_id)
            bug = self._bugs.get(bug_id)
            if bug is None or not body:
                return None
            comment = Comment(
                id=self._fresh_id({c.id for c in bug.comments}),
                text=body,
                author=author or self.author,
                created_at=self._clock(),
            )
            bug.comments.append(comment)
            self._touch(bug, not_before=comment.created_at)
            self._persist()
        self._logger.log_bug_action("comment", bug_id, comments=len(bug.comments))
        return comment

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _ensure_ready(self) -> None:
        if self.loading:
            raise StoreNotReadyError()

    def _fresh_id(self, taken: set[str]) -> str:
        candidate = self._id_factory()
        while candidate in taken:
            candidate = self._id_factory()
        taken.add(candidate)
        return candidate

    def _touch(self, bug: Bug, not_before: datetime | None = None) -> None:
        # updated_at must move strictly forward even with a coarse clock
        now = self._clock()
        floor = bug.updated_at + _TICK
        if not_before is not None and not_before > floor:
            floor = not_before
        bug.updated_at = now if now >= floor else floor

    def _persist(self) -> SaveResult:
        result = self._repository.save(list(self._bugs.values()))
        self.last_save = result
        if not result.ok:
            self._logger.warning(
                "bug snapshot not persisted", error=str(result.error), bugs=result.count
            )
        return result


__all__ = [
    "BugStore",
    "DEFAULT_AUTHOR",
    "DESCRIPTION_REQUIRED",
    "TITLE_REQUIRED",
    "UPDATABLE_FIELDS",
    "validate_form",
]
