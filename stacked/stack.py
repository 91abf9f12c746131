from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from stacked.config import DEFAULT_STACK_CAPACITY
from stacked.errors import (
    OperandTypeError,
    StackOverflowError,
    StackUnderflowError,
    UnknownHandleError,
)


class CellKind(str, Enum):
    INT = "int"
    HANDLE = "handle"


@dataclass(frozen=True, slots=True)
class Cell:
    kind: CellKind
    value: int


class StringTable:
    """Interned `pushs` literals keyed by handle.

    Handles count up from 0 and are never reused. Equal texts are not
    deduplicated: every `intern` call gets a fresh handle.
    """

    def __init__(self) -> None:
        self._strings: dict[int, str] = {}
        self._next = 0

    def intern(self, text: str) -> int:
        handle = self._next
        self._next += 1
        self._strings[handle] = text
        return handle

    def resolve(self, handle: int) -> str:
        try:
            return self._strings[handle]
        except KeyError:
            raise UnknownHandleError(f"no string interned under handle {handle}") from None

    def __len__(self) -> int:
        return len(self._strings)

    def __contains__(self, handle: object) -> bool:
        return handle in self._strings

    def items(self) -> Iterator[tuple[int, str]]:
        return iter(self._strings.items())

    def as_dict(self) -> dict[int, str]:
        return dict(self.items())


class OperandStack:
    """Bounded LIFO of tagged cells used to resolve intrinsic arguments."""

    def __init__(self, capacity: int = DEFAULT_STACK_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._cells: list[Cell] = []

    def __len__(self) -> int:
        return len(self._cells)

    @property
    def sp(self) -> int:
        return len(self._cells)

    def push(self, cell: Cell) -> None:
        if len(self._cells) >= self.capacity:
            raise StackOverflowError(
                f"operand stack overflow: capacity of {self.capacity} exceeded"
            )
        self._cells.append(cell)

    def push_int(self, value: int) -> None:
        self.push(Cell(CellKind.INT, value))

    def push_handle(self, handle: int) -> None:
        self.push(Cell(CellKind.HANDLE, handle))

    def pop(self) -> Cell:
        if not self._cells:
            raise StackUnderflowError("operand stack underflow: pop from empty stack")
        return self._cells.pop()

    def peek(self) -> Cell | None:
        return self._cells[-1] if self._cells else None

    def _pop_kind(self, kind: CellKind) -> int:
        cell = self.pop()
        if cell.kind != kind:
            self._cells.append(cell)
            expected = "integer" if kind == CellKind.INT else "string"
            found = "integer" if cell.kind == CellKind.INT else "string"
            raise OperandTypeError(f"expected {expected} operand, found {found}")
        return cell.value

    def pop_int(self) -> int:
        return self._pop_kind(CellKind.INT)

    def pop_handle(self) -> int:
        return self._pop_kind(CellKind.HANDLE)
