from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

PRIORITIES: tuple[str, ...] = ("Low", "Medium", "High", "Critical")
STATUSES: tuple[str, ...] = ("Open", "In Progress", "Resolved", "Closed")
ALL = "All"
DEFAULT_PRIORITY = "Medium"
DEFAULT_STATUS = "Open"


def is_valid_priority(value: str) -> bool:
    return value in PRIORITIES


def is_valid_status(value: str) -> bool:
    return value in STATUSES


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        stamp = value
    elif isinstance(value, str):
        # Browser payloads use a trailing Z
        stamp = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"unsupported timestamp value: {value!r}")
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp


def _format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat()


@dataclass
class Comment:
    """A note attached to exactly one bug."""

    id: str
    text: str
    author: str
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "author": self.author,
            "createdAt": _format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Comment:
        return cls(
            id=str(raw["id"]),
            text=str(raw["text"]),
            author=str(raw.get("author") or ""),
            created_at=_parse_timestamp(raw["createdAt"]),
        )


@dataclass
class Bug:
    """Canonical in-memory bug record.

    Serialized with the camelCase keys the browser tracker wrote to local
    storage so existing snapshots stay readable.
    """

    id: str
    title: str
    description: str
    priority: str
    status: str
    assigned_to: str
    created_by: str
    created_at: datetime
    updated_at: datetime
    comments: list[Comment] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "status": self.status,
            "assignedTo": self.assigned_to,
            "createdBy": self.created_by,
            "createdAt": _format_timestamp(self.created_at),
            "updatedAt": _format_timestamp(self.updated_at),
            "comments": [c.to_dict() for c in self.comments],
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Bug:
        if not isinstance(raw, dict):
            raise TypeError(f"bug record must be a mapping, got {type(raw).__name__}")
        priority = str(raw["priority"])
        status = str(raw["status"])
        if not is_valid_priority(priority):
            raise ValueError(f"unknown priority: {priority!r}")
        if not is_valid_status(status):
            raise ValueError(f"unknown status: {status!r}")
        comments_raw = raw.get("comments") or []
        if not isinstance(comments_raw, list):
            raise TypeError("comments must be a list")
        created_at = _parse_timestamp(raw["createdAt"])
        updated_at = _parse_timestamp(raw.get("updatedAt") or raw["createdAt"])
        return cls(
            id=str(raw["id"]),
            title=str(raw["title"]),
            description=str(raw["description"]),
            priority=priority,
            status=status,
            assigned_to=str(raw.get("assignedTo") or ""),
            created_by=str(raw.get("createdBy") or ""),
            created_at=created_at,
            updated_at=max(created_at, updated_at),
            comments=[Comment.from_dict(c) for c in comments_raw],
        )


@dataclass
class BugFormData:
    """Create/edit form payload; never persisted on its own."""

    title: str
    description: str
    priority: str = DEFAULT_PRIORITY
    assigned_to: str = ""


@dataclass
class BugFilters:
    status: str = ALL
    priority: str = ALL
    assigned_to: str = ""
    search: str = ""


__all__ = [
    "ALL",
    "Bug",
    "BugFilters",
    "BugFormData",
    "Comment",
    "DEFAULT_PRIORITY",
    "DEFAULT_STATUS",
    "PRIORITIES",
    "STATUSES",
    "is_valid_priority",
    "is_valid_status",
]
