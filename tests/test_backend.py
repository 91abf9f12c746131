from __future__ import annotations

import pytest

from stacked.api import emit_source, run_source
from stacked.backend import Backend, EmitResult, Execution, HandoffBackend, SimulatorBackend
from stacked.errors import CodegenError, StackUnderflowError
from stacked.resolve import ResolvedProgram
from stacked.schemas import HandoffDocument


class FailingBackend:
    """Backend that rejects every program."""

    def __init__(self) -> None:
        self.seen: list[ResolvedProgram] = []

    def emit(self, program: ResolvedProgram) -> EmitResult:
        self.seen.append(program)
        return EmitResult.failure("no target for this host")


def test_backends_satisfy_protocol() -> None:
    assert isinstance(SimulatorBackend(), Backend)
    assert isinstance(HandoffBackend(), Backend)
    assert isinstance(FailingBackend(), Backend)


def test_run_prints_and_exits() -> None:
    execution = run_source(src='pushs "hi\\n"; puts; pushi 3; exit;')
    assert execution == Execution(stdout="hi\n", exit_code=3)


def test_puts_adds_no_newline() -> None:
    execution = run_source(src='pushs "a"; puts; pushs "b"; puts;')
    assert execution.stdout == "ab"


def test_program_without_exit_returns_zero() -> None:
    assert run_source(src='pushs "x"; puts;').exit_code == 0


def test_nothing_runs_after_exit() -> None:
    execution = run_source(src='pushi 5; exit; pushs "late"; puts;')
    assert execution == Execution(stdout="", exit_code=5)


def test_backend_failure_becomes_codegen_error() -> None:
    backend = FailingBackend()
    with pytest.raises(CodegenError, match="no target for this host"):
        emit_source(src="pushi 0; exit;", backend=backend)
    assert len(backend.seen) == 1


def test_backend_never_sees_unresolved_program() -> None:
    backend = FailingBackend()
    with pytest.raises(StackUnderflowError):
        emit_source(src="puts;", backend=backend)
    assert backend.seen == []


def test_handoff_backend_returns_document() -> None:
    doc = emit_source(src='pushi 7; exit; pushs "x"; puts;', backend=HandoffBackend())
    assert isinstance(doc, HandoffDocument)
    assert [(c.index, c.intrinsic.value, c.argument) for c in doc.calls] == [
        (1, "exit", 7),
        (3, "puts", "x"),
    ]
