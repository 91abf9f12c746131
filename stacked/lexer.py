from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum

from stacked.errors import LexError
from stacked.ops import Span

WHITESPACE = frozenset(" \n\t\r")

# Escapes other than these drop both the backslash and the escaped character.
ESCAPES = {"n": "\n", "t": "\t"}


class TokenKind(str, Enum):
    IDENT = "IDENT"
    INT = "INT"
    STRING = "STRING"
    SEMICOLON = "SEMICOLON"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    text: str
    offset: int
    end: int
    line: int
    col: int
    value: str = ""

    @property
    def span(self) -> Span:
        return Span(line=self.line, col=self.col, offset=self.offset)


def _is_alpha(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


def _is_alnum(ch: str) -> bool:
    return ch.isascii() and ch.isalnum()


class Lexer:
    """Scans source text one token at a time.

    `pos` is the cursor; after `next_token()` it sits right after the token
    returned (the same position as `token.end`).
    """

    def __init__(self, src: str, pos: int = 0) -> None:
        self.src = src
        self.pos = pos
        self.line = src.count("\n", 0, pos) + 1
        self.col = pos - (src.rfind("\n", 0, pos) + 1) + 1

    def _advance_to(self, end: int) -> None:
        chunk = self.src[self.pos : end]
        newlines = chunk.count("\n")
        if newlines:
            self.line += newlines
            self.col = len(chunk) - chunk.rfind("\n")
        else:
            self.col += len(chunk)
        self.pos = end

    def _make(self, kind: TokenKind, end: int, value: str = "") -> Token:
        tok = Token(
            kind=kind,
            text=self.src[self.pos : end],
            offset=self.pos,
            end=end,
            line=self.line,
            col=self.col,
            value=value,
        )
        self._advance_to(end)
        return tok

    def _scan_run(self, pred: Callable[[str], bool]) -> int:
        end = self.pos
        while end < len(self.src) and pred(self.src[end]):
            end += 1
        return end

    def _scan_string(self) -> Token:
        src = self.src
        end = self.pos + 1
        out: list[str] = []
        while True:
            if end >= len(src):
                raise LexError(
                    "unterminated string literal",
                    line=self.line,
                    col=self.col,
                    offset=self.pos,
                )
            ch = src[end]
            if ch == '"':
                return self._make(TokenKind.STRING, end + 1, value="".join(out))
            if ch == "\\":
                if end + 1 >= len(src):
                    end = len(src)
                    continue
                out.append(ESCAPES.get(src[end + 1], ""))
                end += 2
                continue
            out.append(ch)
            end += 1

    def next_token(self) -> Token | None:
        src = self.src
        while self.pos < len(src) and src[self.pos] in WHITESPACE:
            self._advance_to(self.pos + 1)
        if self.pos >= len(src):
            return None

        ch = src[self.pos]
        if ch == ";":
            return self._make(TokenKind.SEMICOLON, self.pos + 1)
        if ch == '"':
            return self._scan_string()
        if _is_alpha(ch):
            return self._make(TokenKind.IDENT, self._scan_run(_is_alpha))
        if _is_alnum(ch):
            return self._make(TokenKind.INT, self._scan_run(_is_alnum))
        return self._make(TokenKind.UNKNOWN, self.pos + 1)

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next_token()
            if tok is None:
                return
            yield tok


def next_token(src: str, cursor: int) -> tuple[Token | None, int]:
    lexer = Lexer(src, cursor)
    tok = lexer.next_token()
    return tok, lexer.pos


def tokenize(src: str) -> list[Token]:
    return list(Lexer(src))
