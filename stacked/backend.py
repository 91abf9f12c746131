from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from stacked.ops import IntrinsicKind
from stacked.resolve import ResolvedProgram
from stacked.schemas import HandoffDocument


@dataclass(frozen=True)
class EmitResult:
    ok: bool
    artifact: Any = None
    error: str | None = None

    @classmethod
    def success(cls, artifact: Any) -> EmitResult:
        return cls(ok=True, artifact=artifact)

    @classmethod
    def failure(cls, error: str) -> EmitResult:
        return cls(ok=False, error=error)


@runtime_checkable
class Backend(Protocol):
    """Lowering collaborator.

    Receives a fully resolved program and turns it into an artifact. The
    front-end never looks inside the artifact; it only checks `ok`.
    """

    def emit(self, program: ResolvedProgram) -> EmitResult: ...


@dataclass(frozen=True)
class Execution:
    stdout: str
    exit_code: int


class SimulatorBackend:
    """Plays the resolved calls the way the generated program would run them.

    `puts` writes its text as is (no newline added). `exit` ends the program
    with its argument; calls after it never run. Falling off the end exits 0.
    """

    def emit(self, program: ResolvedProgram) -> EmitResult:
        out: list[str] = []
        for call in program.calls:
            if call.intrinsic == IntrinsicKind.PUTS:
                out.append(str(call.argument))
            elif call.intrinsic == IntrinsicKind.EXIT:
                assert isinstance(call.argument, int)
                return EmitResult.success(Execution(stdout="".join(out), exit_code=call.argument))
            else:
                return EmitResult.failure(f"unsupported intrinsic: {call.intrinsic}")
        return EmitResult.success(Execution(stdout="".join(out), exit_code=0))


class HandoffBackend:
    def emit(self, program: ResolvedProgram) -> EmitResult:
        return EmitResult.success(HandoffDocument.from_resolved(program))
