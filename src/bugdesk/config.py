from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml

from .errors import ConfigError
from .seed import DEFAULT_SEED_COUNT
from .storage import STORAGE_KEY

CONFIG_DEFAULT = "bugdesk.config.yaml"
STORAGE_BACKENDS = ("file", "memory")


@dataclass
class DeskConfig:
    version: int
    # Storage configuration
    storage_backend: str
    storage_path: Path
    storage_key: str
    # Seed configuration
    seed_enabled: bool
    seed_count: int
    # Identity used for createdBy and comment authors
    user_name: str
    # Logging configuration
    logging_json_enabled: bool
    logging_level: str
    # Command telemetry
    telemetry_enabled: bool
    telemetry_store_path: str | None


def _resolve_env_var(value: Any) -> Any:
    """Resolve environment variable if value starts with $."""
    if isinstance(value, str) and value.startswith('$'):
        return os.getenv(value[1:], value)  # Fallback to original if not found
    return value


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name, {}) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping")
    return cast(dict[str, Any], value)


def _build(raw: dict[str, Any], base_dir: Path) -> DeskConfig:
    storage = _section(raw, 'storage')
    seed = _section(raw, 'seed')
    user = _section(raw, 'user')
    logging_config = _section(raw, 'logging')
    telemetry = _section(raw, 'telemetry')

    backend = str(storage.get('backend', 'file')).lower()
    if backend not in STORAGE_BACKENDS:
        raise ConfigError(
            f"Unknown storage backend '{backend}' (expected one of: {', '.join(STORAGE_BACKENDS)})"
        )
    path_value = os.environ.get('BUGDESK_STORAGE_PATH') or _resolve_env_var(
        storage.get('path', '.bugdesk')
    )
    storage_path = Path(str(path_value))
    if not storage_path.is_absolute():
        storage_path = base_dir / storage_path
    try:
        seed_count = int(seed.get('count', DEFAULT_SEED_COUNT))
        version = int(raw.get('version', 1))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid integer in config: {exc}") from exc

    return DeskConfig(
        version=version,
        storage_backend=backend,
        storage_path=storage_path,
        storage_key=str(storage.get('key', STORAGE_KEY)),
        seed_enabled=bool(seed.get('enabled', True)),
        seed_count=max(0, seed_count),
        user_name=str(
            os.environ.get('BUGDESK_USER') or _resolve_env_var(user.get('name', 'Current User'))
        ),
        logging_json_enabled=bool(logging_config.get('json_enabled', False)),
        logging_level=str(logging_config.get('level', 'WARNING')),
        telemetry_enabled=bool(telemetry.get('enabled', False)),
        telemetry_store_path=_resolve_env_var(telemetry.get('store_path')),
    )


def default_config(base_dir: str | Path | None = None) -> DeskConfig:
    return _build({}, Path(base_dir) if base_dir is not None else Path.cwd())


def load_config(path: str | Path) -> DeskConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f'Configuration file not found: {p}')
    try:
        loaded = yaml.safe_load(p.read_text(encoding='utf-8'))
    except yaml.YAMLError as exc:
        raise ConfigError(f'Invalid YAML in {p}: {exc}') from exc
    if loaded is not None and not isinstance(loaded, dict):
        raise ConfigError(f'Configuration root must be a mapping: {p}')
    return _build(cast(dict[str, Any], loaded or {}), p.parent)


__all__ = ["CONFIG_DEFAULT", "ConfigError", "DeskConfig", "default_config", "load_config"]
