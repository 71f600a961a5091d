"""Error taxonomy for BugDesk.

Store operations report "unknown id" through absent results (``None`` /
``False``) rather than exceptions; the classes below cover the cases that
need to carry detail to the caller.

Public API:
- BugDeskError and its subclasses
- classify_error(exc) -> ErrorInfo
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


class BugDeskError(Exception):
    """Base class for all BugDesk errors."""


class ValidationError(BugDeskError):
    """Form input rejected; ``errors`` maps field name to message."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__("; ".join(self.errors.values()) or "invalid input")


class NotFoundError(BugDeskError):
    def __init__(self, bug_id: str) -> None:
        self.bug_id = bug_id
        super().__init__(f"Bug not found: {bug_id}")


class PersistenceReadError(BugDeskError):
    """Stored snapshot is unreadable. Never escapes ``BugRepository.load``."""


class PersistenceWriteError(BugDeskError):
    """Storage rejected a snapshot write."""


class StoreNotReadyError(BugDeskError):
    def __init__(self) -> None:
        super().__init__("Bug store is still loading; call initialize() first")


class ConfigError(BugDeskError):
    pass


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    transient: bool = False
    details: dict[str, Any] | None = None


def classify_error(exc: BaseException) -> ErrorInfo:
    """Map an exception onto a reporting category.

    - ValidationError -> 'validation' (field messages in details)
    - NotFoundError -> 'not_found'
    - PersistenceReadError / JSON decode errors -> 'persistence.read'
    - PersistenceWriteError / OSError -> 'persistence.write', transient
    - StoreNotReadyError -> 'store.loading', transient
    - ConfigError -> 'config'
    - Fallback -> 'generic'
    """
    msg = str(exc) if exc else ""
    name = exc.__class__.__name__
    if isinstance(exc, ValidationError):
        return ErrorInfo("validation", msg, name, details=dict(exc.errors))
    if isinstance(exc, NotFoundError):
        return ErrorInfo("not_found", msg, name, details={"bug_id": exc.bug_id})
    if isinstance(exc, (PersistenceReadError, json.JSONDecodeError)):
        return ErrorInfo("persistence.read", msg, name)
    if isinstance(exc, (PersistenceWriteError, OSError)):
        return ErrorInfo("persistence.write", msg, name, transient=True)
    if isinstance(exc, StoreNotReadyError):
        return ErrorInfo("store.loading", msg, name, transient=True)
    if isinstance(exc, ConfigError):
        return ErrorInfo("config", msg, name)
    return ErrorInfo("generic", msg, name)


__all__ = [
    "BugDeskError",
    "ConfigError",
    "ErrorInfo",
    "NotFoundError",
    "PersistenceReadError",
    "PersistenceWriteError",
    "StoreNotReadyError",
    "ValidationError",
    "classify_error",
]
