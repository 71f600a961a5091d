from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from .errors import PersistenceReadError, PersistenceWriteError
from .logging import StructuredLogger, get_logger
from .models import Bug

logger = logging.getLogger(__name__)

STORAGE_KEY = "bugs"
_KEY_ALLOWED = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_.")


class KeyValueStorage(Protocol):
    """String-keyed get/set facility (browser local storage stand-in)."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def clear(self) -> None:
        self._items.clear()


class FileStorage:
    """One ``<key>.json`` file per key under ``root``."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path_for(self, key: str) -> Path:
        if not key or not set(key) <= _KEY_ALLOWED or key.startswith("."):
            raise ValueError(f"invalid storage key: {key!r}")
        return self.root / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            tmp.write_text(value, encoding="utf-8")
            os.replace(tmp, path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise


@dataclass(frozen=True)
class SaveResult:
    ok: bool
    count: int
    error: PersistenceWriteError | None = None


def decode_bugs(payload: str) -> list[Bug]:
    try:
        raw: Any = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise PersistenceReadError(f"stored bugs are not valid JSON: {exc}") from exc
    if not isinstance(raw, list):
        raise PersistenceReadError(f"stored bugs must be a list, got {type(raw).__name__}")
    try:
        return [Bug.from_dict(item) for item in raw]
    except (KeyError, TypeError, ValueError) as exc:
        raise PersistenceReadError(f"malformed bug record: {exc}") from exc


def encode_bugs(bugs: list[Bug]) -> str:
    return json.dumps([b.to_dict() for b in bugs], indent=2)


class BugRepository:
    """Whole-collection persistence of bugs under a single storage key."""

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = STORAGE_KEY,
        structured_logger: StructuredLogger | None = None,
    ) -> None:
        self.storage = storage
        self.key = key
        self._logger = structured_logger or get_logger()

    def load(self) -> list[Bug]:
        """Return stored bugs, or ``[]`` when absent or unreadable."""
        try:
            payload = self.storage.get_item(self.key)
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            logger.warning("Failed to read stored bugs under %r: %s", self.key, exc)
            return []
        if payload is None or not payload.strip():
            logger.debug("No stored bugs under %r", self.key)
            return []
        try:
            return decode_bugs(payload)
        except PersistenceReadError as exc:
            logger.warning("Ignoring unreadable bug snapshot under %r: %s", self.key, exc)
            return []

    def save(self, bugs: list[Bug]) -> SaveResult:
        try:
            self.storage.set_item(self.key, encode_bugs(bugs))
        except (OSError, TypeError, ValueError) as exc:
            error = PersistenceWriteError(f"failed to persist {len(bugs)} bugs: {exc}")
            self._logger.log_error(
                "persist_failed", error=str(exc), operation="persist_failed", key=self.key
            )
            return SaveResult(ok=False, count=len(bugs), error=error)
        return SaveResult(ok=True, count=len(bugs))


__all__ = [
    "BugRepository",
    "FileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "STORAGE_KEY",
    "SaveResult",
    "decode_bugs",
    "encode_bugs",
]
