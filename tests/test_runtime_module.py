from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from bugdesk import runtime
from bugdesk.config import CONFIG_DEFAULT, default_config
from bugdesk.storage import FileStorage, MemoryStorage


def test_prepare_config_defaults_when_default_file_missing(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.chdir(tmp_path)
    args = SimpleNamespace(cmd="list", config=CONFIG_DEFAULT, memory=False)

    def loader(path: str):  # pragma: no cover - must not be called
        raise AssertionError(path)

    cfg = runtime.prepare_config(args, loader=loader)
    assert cfg.storage_backend == "file"
    assert cfg.storage_path == tmp_path / ".bugdesk"


def test_prepare_config_uses_loader_for_explicit_path() -> None:
    args = SimpleNamespace(cmd="list", config="custom.yaml", memory=True)
    seen: list[str] = []

    def loader(path: str):
        seen.append(path)
        return default_config("/tmp")

    cfg = runtime.prepare_config(args, loader=loader)
    assert seen == ["custom.yaml"]
    assert cfg.storage_backend == "memory"


def test_build_store_selects_backend(tmp_path: Path) -> None:
    cfg = default_config(tmp_path)
    cfg.seed_enabled = False
    file_store = runtime.build_store(cfg)
    assert isinstance(file_store._repository.storage, FileStorage)
    cfg.storage_backend = "memory"
    memory_store = runtime.build_store(cfg)
    assert isinstance(memory_store._repository.storage, MemoryStorage)
    assert memory_store.initialize_blocking().bugs == []


def test_build_store_seeds_configured_count(tmp_path: Path) -> None:
    cfg = default_config(tmp_path)
    cfg.storage_backend = "memory"
    cfg.seed_count = 5
    store = runtime.build_store(cfg).initialize_blocking()
    assert len(store) == 5
    assert store.author == cfg.user_name


def test_execute_command_success(monkeypatch: pytest.MonkeyPatch) -> None:
    args = SimpleNamespace(cmd="list")
    telemetry_calls: list[tuple[str, int, float]] = []

    def fake_emit(config: object, command: str, exit_code: int, duration: float) -> None:
        telemetry_calls.append((command, exit_code, duration))

    monkeypatch.setattr(runtime.telemetry, "emit", fake_emit)

    exit_code = runtime.execute_command(lambda: 5, args, None, "list")

    assert exit_code == 5
    assert telemetry_calls and telemetry_calls[0][:2] == ("list", 5)


def test_execute_command_propagates_exceptions(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[int] = []
    monkeypatch.setattr(
        runtime.telemetry, "emit", lambda cfg, command, code, duration: calls.append(code)
    )

    def boom() -> int:
        raise RuntimeError("kaput")

    with pytest.raises(RuntimeError):
        runtime.execute_command(boom, SimpleNamespace(), None, "create")
    assert calls == [1]
