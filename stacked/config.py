from __future__ import annotations

import os
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field

# Operand stack depth when nothing else is configured.
DEFAULT_STACK_CAPACITY = 100

ENV_PREFIX = "STACKED_"


class UnknownCharPolicy(str, Enum):
    IGNORE = "ignore"
    WARN = "warn"
    ERROR = "error"


class CompilerSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    stack_capacity: int = Field(default=DEFAULT_STACK_CAPACITY, ge=1, le=1_000_000)
    unknown_chars: UnknownCharPolicy = UnknownCharPolicy.WARN
    # Raise the first error instead of collecting one per statement.
    fail_fast: bool = False


def repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def load_env() -> None:
    # Prefer a project-local `.env`, fall back to searching from CWD.
    root_env = repo_root() / ".env"
    env_path = str(root_env) if root_env.exists() else (find_dotenv(usecwd=True) or str(root_env))
    load_dotenv(env_path)


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise ValueError(f"cannot read config {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"config must be a YAML mapping: {path}")
    return dict(data)


def _env_settings() -> dict[str, Any]:
    out: dict[str, Any] = {}
    for name in CompilerSettings.model_fields:
        raw = os.getenv(ENV_PREFIX + name.upper())
        if raw is not None and raw.strip():
            out[name] = raw.strip()
    return out


def load_settings(
    *,
    config_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> CompilerSettings:
    """Build settings from defaults, a YAML file, the environment, then overrides.

    Later layers win. `None` values in `overrides` are skipped so CLI flags
    that were not given leave the lower layers alone.
    """
    load_env()
    data: dict[str, Any] = {}

    if config_path is None:
        raw_path = (os.getenv(ENV_PREFIX + "CONFIG") or "").strip()
        config_path = Path(raw_path) if raw_path else None
    if config_path is not None:
        data.update(_read_config_file(config_path))

    data.update(_env_settings())
    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return CompilerSettings.model_validate(data)
