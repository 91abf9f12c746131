from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum


class CompileError(Exception):
    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        col: int | None = None,
        offset: int | None = None,
        statement: int | None = None,
    ) -> None:
        self.message = str(message)
        self.line = line
        self.col = col
        self.offset = offset
        self.statement = statement
        prefix = ""
        if line is not None and col is not None:
            prefix = f"line {line} col {col}: "
        super().__init__(prefix + self.message)


class LexError(CompileError):
    pass


class ParseError(CompileError):
    pass


class NumericError(CompileError):
    pass


class ResolutionError(CompileError):
    """Raised while replaying the instruction sequence against the operand stack.

    `statement` holds the index of the offending op in the sequence.
    """


class StackUnderflowError(ResolutionError):
    pass


class StackOverflowError(ResolutionError):
    pass


class OperandTypeError(ResolutionError):
    pass


class UnknownHandleError(ResolutionError):
    pass


class CodegenError(CompileError):
    pass


class BuildError(CompileError):
    """Every statement-level error found in a single build pass."""

    def __init__(self, errors: Sequence[CompileError]) -> None:
        self.errors = list(errors)
        lines = [str(e) for e in self.errors]
        head = f"{len(self.errors)} error(s) in program"
        super().__init__("\n  ".join([head, *lines]))


class Severity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    severity: Severity
    message: str
    line: int | None = None
    col: int | None = None
    statement: int | None = None

    def __str__(self) -> str:
        where = ""
        if self.line is not None and self.col is not None:
            where = f"line {self.line} col {self.col}: "
        return f"{self.severity.value}: {where}{self.message}"
