from __future__ import annotations

from typing import Any

from stacked.backend import Backend, Execution, SimulatorBackend
from stacked.builder import Program, build_program
from stacked.config import CompilerSettings
from stacked.errors import CodegenError
from stacked.resolve import ResolvedProgram, resolve_program


def parse_source(*, src: str, settings: CompilerSettings | None = None) -> Program:
    return build_program(src, settings=settings)


def compile_source(*, src: str, settings: CompilerSettings | None = None) -> ResolvedProgram:
    settings = settings or CompilerSettings()
    program = build_program(src, settings=settings)
    return resolve_program(program, capacity=settings.stack_capacity)


def emit_source(
    *, src: str, backend: Backend, settings: CompilerSettings | None = None
) -> Any:
    resolved = compile_source(src=src, settings=settings)
    result = backend.emit(resolved)
    if not result.ok:
        raise CodegenError(result.error or "backend reported a failure")
    return result.artifact


def run_source(*, src: str, settings: CompilerSettings | None = None) -> Execution:
    return emit_source(src=src, backend=SimulatorBackend(), settings=settings)
