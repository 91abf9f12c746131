from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True, slots=True)
class Span:
    line: int
    col: int
    offset: int


class OpKind(str, Enum):
    NOP = "nop"
    PUSH_INT = "push_int"
    PUSH_STR = "push_str"
    INTRINSIC = "intrinsic"


class IntrinsicKind(str, Enum):
    EXIT = "exit"
    PUTS = "puts"


@dataclass(frozen=True, slots=True)
class Op:
    """One instruction of the program.

    The kind decides which field is meaningful: `operand` for PUSH_INT, `text`
    for PUSH_STR, `intrinsic` for INTRINSIC. The others stay at 0 / "" / None.
    """

    kind: OpKind = OpKind.NOP
    operand: int = 0
    text: str = ""
    intrinsic: IntrinsicKind | None = None
    span: Span | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.kind != OpKind.PUSH_INT and self.operand != 0:
            raise ValueError(f"{self.kind.value} op cannot carry an integer operand")
        if self.kind != OpKind.PUSH_STR and self.text:
            raise ValueError(f"{self.kind.value} op cannot carry a string operand")
        if (self.kind == OpKind.INTRINSIC) != (self.intrinsic is not None):
            raise ValueError("intrinsic kind must be set exactly on INTRINSIC ops")

    @classmethod
    def push_int(cls, value: int, *, span: Span | None = None) -> Op:
        return cls(OpKind.PUSH_INT, operand=value, span=span)

    @classmethod
    def push_str(cls, value: str, *, span: Span | None = None) -> Op:
        return cls(OpKind.PUSH_STR, text=value, span=span)

    @classmethod
    def call(cls, intrinsic: IntrinsicKind, *, span: Span | None = None) -> Op:
        return cls(OpKind.INTRINSIC, intrinsic=intrinsic, span=span)

    @classmethod
    def nop(cls, *, span: Span | None = None) -> Op:
        return cls(OpKind.NOP, span=span)

    def describe(self) -> str:
        if self.kind == OpKind.PUSH_INT:
            return f"PushInt({self.operand})"
        if self.kind == OpKind.PUSH_STR:
            return f"PushString({self.text!r})"
        if self.kind == OpKind.INTRINSIC:
            assert self.intrinsic is not None
            return f"Intrinsic({self.intrinsic.name.title()})"
        return "Nop"


NOP = Op()
EXIT = Op.call(IntrinsicKind.EXIT)
PUTS = Op.call(IntrinsicKind.PUTS)
