from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from stacked.config import DEFAULT_STACK_CAPACITY, CompilerSettings, UnknownCharPolicy, load_settings


def test_defaults() -> None:
    settings = load_settings()
    assert settings == CompilerSettings()
    assert settings.stack_capacity == DEFAULT_STACK_CAPACITY == 100
    assert settings.unknown_chars == UnknownCharPolicy.WARN
    assert settings.fail_fast is False


def test_yaml_file_then_env_then_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg = tmp_path / "stacked.yaml"
    cfg.write_text("stack_capacity: 16\nunknown_chars: error\nfail_fast: true\n", encoding="utf-8")

    settings = load_settings(config_path=cfg)
    assert (settings.stack_capacity, settings.unknown_chars, settings.fail_fast) == (
        16,
        UnknownCharPolicy.ERROR,
        True,
    )

    monkeypatch.setenv("STACKED_STACK_CAPACITY", "8")
    assert load_settings(config_path=cfg).stack_capacity == 8

    settings = load_settings(config_path=cfg, overrides={"stack_capacity": 4, "fail_fast": None})
    assert settings.stack_capacity == 4
    assert settings.fail_fast is True


def test_config_path_from_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg = tmp_path / "c.yml"
    cfg.write_text("unknown_chars: ignore\n", encoding="utf-8")
    monkeypatch.setenv("STACKED_CONFIG", str(cfg))
    assert load_settings().unknown_chars == UnknownCharPolicy.IGNORE


def test_env_booleans(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STACKED_FAIL_FAST", "1")
    assert load_settings().fail_fast is True


def test_empty_yaml_file_uses_defaults(tmp_path: Path) -> None:
    cfg = tmp_path / "empty.yaml"
    cfg.write_text("", encoding="utf-8")
    assert load_settings(config_path=cfg) == CompilerSettings()


def test_yaml_must_be_mapping(tmp_path: Path) -> None:
    cfg = tmp_path / "list.yaml"
    cfg.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError, match="YAML mapping"):
        load_settings(config_path=cfg)


@pytest.mark.parametrize(
    "overrides",
    [
        {"stack_capacity": 0},
        {"unknown_chars": "explode"},
        {"stack_size": 10},
    ],
)
def test_invalid_settings_are_rejected(overrides: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        load_settings(overrides=overrides)


def test_settings_are_frozen() -> None:
    settings = CompilerSettings()
    with pytest.raises(ValidationError):
        settings.stack_capacity = 5  # type: ignore[misc]


def test_unreadable_config_becomes_value_error(tmp_path: Path) -> None:
    bad = tmp_path / "bad.yaml"
    bad.write_text("stack_capacity: [1\n", encoding="utf-8")
    with pytest.raises(ValueError, match="cannot read config"):
        load_settings(config_path=bad)
    with pytest.raises(ValueError, match="cannot read config"):
        load_settings(config_path=tmp_path / "missing.yaml")
