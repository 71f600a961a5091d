"""Runtime helpers for BugDesk CLI orchestration."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from bugdesk import telemetry
from bugdesk.config import CONFIG_DEFAULT, DeskConfig, default_config, load_config
from bugdesk.logging import StructuredLogger, configure_logging
from bugdesk.seed import generate_seed_bugs
from bugdesk.storage import BugRepository, FileStorage, KeyValueStorage, MemoryStorage
from bugdesk.store import BugStore


class _HandlerCallable(Protocol):
    def __call__(self) -> Any: ...


def prepare_config(
    args: Any, *, loader: Callable[[str], DeskConfig] = load_config
) -> DeskConfig:
    """Load DeskConfig for the given argparse namespace.

    The default config file is optional; an explicitly named one is not.
    """
    path = getattr(args, "config", None) or CONFIG_DEFAULT
    if path == CONFIG_DEFAULT and not Path(path).exists():
        cfg = default_config()
    else:
        cfg = loader(path)
    if getattr(args, "memory", False):
        cfg.storage_backend = "memory"
    return cfg


def build_store(cfg: DeskConfig, structured_logger: StructuredLogger | None = None) -> BugStore:
    storage: KeyValueStorage
    if cfg.storage_backend == "memory":
        storage = MemoryStorage()
    else:
        storage = FileStorage(cfg.storage_path)
    seed = (
        functools.partial(generate_seed_bugs, count=cfg.seed_count) if cfg.seed_enabled else None
    )
    return BugStore(
        BugRepository(storage, key=cfg.storage_key, structured_logger=structured_logger),
        seed=seed,
        author=cfg.user_name,
        structured_logger=structured_logger,
    )


def open_store(cfg: DeskConfig) -> BugStore:
    slog = configure_logging(json_logging=cfg.logging_json_enabled, level=cfg.logging_level)
    return build_store(cfg, slog).initialize_blocking()


def execute_command(
    handler: _HandlerCallable, args: Any, cfg: DeskConfig | None, command: str
) -> int:
    """Execute a command handler while emitting telemetry."""
    start = time.monotonic()
    try:
        result = handler()
        exit_code = int(result) if result is not None else 0
    except SystemExit as exc:  # pragma: no cover - allow propagation
        exit_code = int(exc.code or 0)
        telemetry.emit(cfg, command, exit_code, time.monotonic() - start)
        raise
    except Exception:
        telemetry.emit(cfg, command, 1, time.monotonic() - start)
        raise
    telemetry.emit(cfg, command, exit_code, max(0.0, time.monotonic() - start))
    return exit_code


__all__ = ["build_store", "execute_command", "open_store", "prepare_config"]
