from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest


def pytest_configure() -> None:
    project_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(project_root))


@pytest.fixture(autouse=True)
def _clean_stacked_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("STACKED_CONFIG", "STACKED_STACK_CAPACITY", "STACKED_UNKNOWN_CHARS", "STACKED_FAIL_FAST"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def write_program(tmp_path: Path) -> Callable[[str], Path]:
    def _write(src: str, name: str = "prog.stk") -> Path:
        p = tmp_path / name
        p.write_text(src, encoding="utf-8")
        return p

    return _write
