from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from stacked.config import DEFAULT_STACK_CAPACITY
from stacked.errors import ResolutionError
from stacked.ops import IntrinsicKind, Op, OpKind, Span
from stacked.stack import OperandStack, StringTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResolvedCall:
    """An intrinsic together with the argument it pops at compile time."""

    index: int
    intrinsic: IntrinsicKind
    argument: int | str
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class ResolvedProgram:
    ops: tuple[Op, ...]
    calls: tuple[ResolvedCall, ...]
    strings: Mapping[int, str]
    residual: int = 0

    def call_at(self, index: int) -> ResolvedCall | None:
        for call in self.calls:
            if call.index == index:
                return call
        return None


def _located(err: ResolutionError, *, index: int, op: Op) -> ResolutionError:
    span = op.span
    return type(err)(
        f"op #{index} {op.describe()}: {err.message}",
        line=span.line if span else None,
        col=span.col if span else None,
        offset=span.offset if span else None,
        statement=index,
    )


def resolve_program(
    ops: Iterable[Op], *, capacity: int = DEFAULT_STACK_CAPACITY
) -> ResolvedProgram:
    """Replay `ops` against a fresh operand stack and resolve every intrinsic.

    Any resolution error aborts the whole pass; nothing partial is returned.
    """
    ops = tuple(ops)
    stack = OperandStack(capacity)
    strings = StringTable()
    calls: list[ResolvedCall] = []

    for index, op in enumerate(ops):
        try:
            if op.kind == OpKind.PUSH_INT:
                stack.push_int(op.operand)
            elif op.kind == OpKind.PUSH_STR:
                stack.push_handle(strings.intern(op.text))
            elif op.kind == OpKind.INTRINSIC:
                argument: int | str
                if op.intrinsic == IntrinsicKind.EXIT:
                    argument = stack.pop_int()
                else:
                    argument = strings.resolve(stack.pop_handle())
                calls.append(
                    ResolvedCall(index=index, intrinsic=op.intrinsic, argument=argument, span=op.span)
                )
                logger.debug("op #%d: %s resolved to %r", index, op.describe(), argument)
        except ResolutionError as e:
            raise _located(e, index=index, op=op) from None

    if len(stack):
        logger.warning("%d operand(s) left on the stack after the last op", len(stack))

    return ResolvedProgram(
        ops=ops,
        calls=tuple(calls),
        strings=MappingProxyType(strings.as_dict()),
        residual=len(stack),
    )
