from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from stacked.ops import IntrinsicKind, Op, OpKind
from stacked.resolve import ResolvedProgram

HANDOFF_SCHEMA_VERSION = 1


class SourceRef(BaseModel):
    line: int = Field(ge=1)
    col: int = Field(ge=1)
    offset: int = Field(ge=0)


class OpRecord(BaseModel):
    index: int = Field(ge=0)
    kind: OpKind
    operand: int = 0
    text: str = ""
    intrinsic: IntrinsicKind | None = None
    source: SourceRef | None = None

    @classmethod
    def from_op(cls, index: int, op: Op) -> OpRecord:
        source = None
        if op.span is not None:
            source = SourceRef(line=op.span.line, col=op.span.col, offset=op.span.offset)
        return cls(
            index=index,
            kind=op.kind,
            operand=op.operand,
            text=op.text,
            intrinsic=op.intrinsic,
            source=source,
        )


class CallRecord(BaseModel):
    index: int = Field(ge=0)
    intrinsic: IntrinsicKind
    argument: int | str

    @model_validator(mode="after")
    def _argument_matches_intrinsic(self) -> "CallRecord":
        if self.intrinsic == IntrinsicKind.EXIT and not isinstance(self.argument, int):
            raise ValueError("exit takes an integer argument")
        if self.intrinsic == IntrinsicKind.PUTS and not isinstance(self.argument, str):
            raise ValueError("puts takes a string argument")
        return self


class HandoffDocument(BaseModel):
    """What an out-of-process backend receives: the ops and each call's argument."""

    schema_version: int = Field(default=HANDOFF_SCHEMA_VERSION, ge=1)
    ops: list[OpRecord] = Field(default_factory=list)
    calls: list[CallRecord] = Field(default_factory=list)
    strings: dict[int, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _calls_point_at_intrinsics(self) -> "HandoffDocument":
        by_index = {o.index: o for o in self.ops}
        for call in self.calls:
            op = by_index.get(call.index)
            if op is None or op.kind != OpKind.INTRINSIC or op.intrinsic != call.intrinsic:
                raise ValueError(f"call at index {call.index} does not match an intrinsic op")
        return self

    @classmethod
    def from_resolved(cls, program: ResolvedProgram) -> HandoffDocument:
        return cls(
            ops=[OpRecord.from_op(i, op) for i, op in enumerate(program.ops)],
            calls=[
                CallRecord(index=c.index, intrinsic=c.intrinsic, argument=c.argument)
                for c in program.calls
            ],
            strings=dict(program.strings),
        )
