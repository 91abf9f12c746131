from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from stacked.config import CompilerSettings, UnknownCharPolicy
from stacked.errors import (
    BuildError,
    CompileError,
    Diagnostic,
    LexError,
    NumericError,
    ParseError,
    Severity,
)
from stacked.lexer import Lexer, Token, TokenKind
from stacked.ops import IntrinsicKind, Op, OpKind, Span

logger = logging.getLogger(__name__)

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

PUSH_KEYWORDS = {
    "pushi": OpKind.PUSH_INT,
    "pushs": OpKind.PUSH_STR,
}
INTRINSIC_KEYWORDS = {
    "exit": IntrinsicKind.EXIT,
    "puts": IntrinsicKind.PUTS,
}
KEYWORDS = frozenset(PUSH_KEYWORDS) | frozenset(INTRINSIC_KEYWORDS)

# Literal token kind each push op takes.
LITERAL_FOR = {
    OpKind.PUSH_INT: TokenKind.INT,
    OpKind.PUSH_STR: TokenKind.STRING,
}
LITERAL_NAMES = {
    TokenKind.INT: "integer",
    TokenKind.STRING: "string",
}


@dataclass(frozen=True, slots=True)
class Program:
    ops: tuple[Op, ...]
    diagnostics: tuple[Diagnostic, ...] = ()

    def __len__(self) -> int:
        return len(self.ops)

    def __iter__(self) -> Iterator[Op]:
        return iter(self.ops)

    def __getitem__(self, index: int) -> Op:
        return self.ops[index]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]


@dataclass(slots=True)
class _Statement:
    kind: OpKind = OpKind.NOP
    intrinsic: IntrinsicKind | None = None
    keyword: Token | None = None
    literal: Token | None = None
    int_value: int = 0
    start: Span | None = None
    touched: bool = False

    @property
    def empty(self) -> bool:
        return self.keyword is None and self.literal is None

    def freeze(self) -> Op:
        if self.kind == OpKind.PUSH_INT:
            return Op.push_int(self.int_value, span=self.start)
        if self.kind == OpKind.PUSH_STR:
            assert self.literal is not None
            return Op.push_str(self.literal.value, span=self.start)
        if self.kind == OpKind.INTRINSIC:
            assert self.intrinsic is not None
            return Op.call(self.intrinsic, span=self.start)
        return Op.nop(span=self.start)


def parse_int_literal(token: Token, *, statement: int | None = None) -> int:
    text = token.text
    if not (text.isascii() and text.isdigit()):
        raise NumericError(
            f"invalid integer literal {text!r}",
            line=token.line,
            col=token.col,
            offset=token.offset,
            statement=statement,
        )
    value = int(text)
    if not INT32_MIN <= value <= INT32_MAX:
        raise NumericError(
            f"integer literal {text} does not fit in 32 bits",
            line=token.line,
            col=token.col,
            offset=token.offset,
            statement=statement,
        )
    return value


class InstructionBuilder:
    """Assembles tokens into instructions, one `;`-terminated statement at a time.

    Each statement accumulates into `current`. A literal binds to the keyword
    that opened the statement, so `pushi` only accepts an integer and `pushs`
    only a string. On `;` the statement is frozen, appended, traced, and the
    accumulator goes back to Nop.

    After an error, `recover()` drops the rest of the broken statement so that
    building can continue from the next `;`.
    """

    def __init__(self, *, settings: CompilerSettings | None = None) -> None:
        self.settings = settings or CompilerSettings()
        self.ops: list[Op] = []
        self.diagnostics: list[Diagnostic] = []
        self.current = _Statement()
        self.statement = 0
        self._skipping = False

    def _error(self, cls: type[CompileError], message: str, token: Token) -> CompileError:
        return cls(
            message,
            line=token.line,
            col=token.col,
            offset=token.offset,
            statement=self.statement,
        )

    def _warn(self, message: str, token: Token) -> None:
        diag = Diagnostic(
            severity=Severity.WARNING,
            message=message,
            line=token.line,
            col=token.col,
            statement=self.statement,
        )
        self.diagnostics.append(diag)
        logger.warning("%s", diag)

    def _close_statement(self) -> _Statement:
        stmt = self.current
        self.current = _Statement()
        self.statement += 1
        return stmt

    def feed(self, token: Token) -> None:
        if self._skipping:
            if token.kind == TokenKind.SEMICOLON:
                self._skipping = False
                self._close_statement()
            return

        if token.kind != TokenKind.SEMICOLON:
            self.current.touched = True
        if self.current.start is None and token.kind != TokenKind.UNKNOWN:
            self.current.start = token.span

        if token.kind == TokenKind.SEMICOLON:
            self._terminate(token)
        elif token.kind == TokenKind.IDENT:
            self._keyword(token)
        elif token.kind in (TokenKind.INT, TokenKind.STRING):
            self._literal(token)
        else:
            self._unknown(token)

    def _keyword(self, token: Token) -> None:
        word = token.text
        if word not in KEYWORDS:
            raise self._error(ParseError, f"unknown instruction {word!r}", token)
        stmt = self.current
        if stmt.keyword is not None:
            raise self._error(
                ParseError,
                f"unexpected {word!r} after {stmt.keyword.text!r}; missing ';'?",
                token,
            )
        stmt.keyword = token
        if word in PUSH_KEYWORDS:
            stmt.kind = PUSH_KEYWORDS[word]
        else:
            stmt.kind = OpKind.INTRINSIC
            stmt.intrinsic = INTRINSIC_KEYWORDS[word]

    def _literal(self, token: Token) -> None:
        stmt = self.current
        what = LITERAL_NAMES[token.kind]
        if stmt.keyword is None:
            raise self._error(ParseError, f"{what} literal {token.text} without an instruction", token)
        expected = LITERAL_FOR.get(stmt.kind)
        if expected is None:
            raise self._error(
                ParseError, f"{stmt.keyword.text!r} does not take an operand", token
            )
        if expected != token.kind:
            raise self._error(
                ParseError,
                f"{stmt.keyword.text!r} expects {LITERAL_NAMES[expected]} literal, got {what}",
                token,
            )
        if stmt.literal is not None:
            raise self._error(
                ParseError, f"{stmt.keyword.text!r} takes a single operand", token
            )
        if token.kind == TokenKind.INT:
            stmt.int_value = parse_int_literal(token, statement=self.statement)
        stmt.literal = token

    def _unknown(self, token: Token) -> None:
        policy = self.settings.unknown_chars
        if policy == UnknownCharPolicy.IGNORE:
            return
        message = f"unexpected character {token.text!r}"
        if policy == UnknownCharPolicy.ERROR:
            raise self._error(LexError, message, token)
        self._warn(message + " skipped", token)

    def _terminate(self, token: Token) -> None:
        index = self.statement
        stmt = self._close_statement()
        if stmt.kind in LITERAL_FOR and stmt.literal is None:
            assert stmt.keyword is not None
            raise ParseError(
                f"{stmt.keyword.text!r} requires an operand",
                line=token.line,
                col=token.col,
                offset=token.offset,
                statement=index,
            )
        op = stmt.freeze()
        self.ops.append(op)
        logger.debug("op #%d: %s", len(self.ops) - 1, op.describe())

    def recover(self) -> None:
        """Skip the rest of the statement that just failed."""
        # An error raised on `;` has already closed its statement.
        if self.current.touched:
            self._skipping = True

    def finish(self) -> Program:
        stmt = self.current
        if not self._skipping and not stmt.empty:
            first = stmt.keyword or stmt.literal
            assert first is not None
            raise self._error(ParseError, "unterminated statement, expected ';'", first)
        return Program(ops=tuple(self.ops), diagnostics=tuple(self.diagnostics))


def build_program(src: str, *, settings: CompilerSettings | None = None) -> Program:
    settings = settings or CompilerSettings()
    builder = InstructionBuilder(settings=settings)
    lexer = Lexer(src)
    errors: list[CompileError] = []

    while True:
        try:
            token = lexer.next_token()
        except LexError as e:
            e.statement = builder.statement
            if settings.fail_fast:
                raise
            # Nothing after an unterminated string can be tokenized.
            errors.append(e)
            builder.recover()
            break
        if token is None:
            break
        try:
            builder.feed(token)
        except CompileError as e:
            if settings.fail_fast:
                raise
            errors.append(e)
            builder.recover()

    try:
        program = builder.finish()
    except CompileError as e:
        if settings.fail_fast:
            raise
        errors.append(e)

    if errors:
        raise BuildError(errors)
    logger.debug("built %d op(s) from %d statement(s)", len(program), builder.statement)
    return program
