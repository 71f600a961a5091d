"""Opt-in JSONL record of CLI command runs."""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from bugdesk.config import DeskConfig

DEFAULT_FILENAME = "telemetry.jsonl"
DEFAULT_DIRNAME = ".bugdesk"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TelemetryConfig:
    enabled: bool
    store_path: Path


def _environment_enabled() -> bool | None:
    flag = os.environ.get("BUGDESK_TELEMETRY")
    if flag is None:
        return None
    return flag == "1"


def resolve_config(cfg: DeskConfig | None) -> TelemetryConfig:
    env_override = _environment_enabled()
    enabled = env_override if env_override is not None else bool(cfg and cfg.telemetry_enabled)
    override = os.environ.get("BUGDESK_TELEMETRY_PATH")
    if override:
        store_path = Path(override)
    elif cfg and cfg.telemetry_store_path:
        store_path = Path(cfg.telemetry_store_path)
    else:
        store_path = Path.home() / DEFAULT_DIRNAME / DEFAULT_FILENAME
    return TelemetryConfig(enabled=enabled, store_path=store_path)


def emit(
    cfg: DeskConfig | None,
    command: str,
    exit_code: int,
    duration_seconds: float,
) -> None:
    config = resolve_config(cfg)
    if not config.enabled:
        return
    payload: dict[str, Any] = {
        "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "command": command,
        "exit_code": int(exit_code),
        "duration_ms": int(duration_seconds * 1000),
        "pid": os.getpid(),
    }
    try:
        config.store_path.parent.mkdir(parents=True, exist_ok=True)
        with config.store_path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(payload, separators=(",", ":")) + "\n")
    except OSError as exc:
        logger.debug("telemetry write to %s failed: %s", config.store_path, exc)


__all__ = ["TelemetryConfig", "emit", "resolve_config"]
