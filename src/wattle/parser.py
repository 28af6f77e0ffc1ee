"""Forward-only token cursor for the wat grammar.

Grammar rules never index into the token list directly. They ask the
:class:`Parser` whether an *element* is next (``peek``/``peek2``), consume
one (``parse``), or run a sub-parse inside a parenthesized group
(``parens``). An element is any object exposing ``display``,
``peek(parser, offset)`` and ``parse(parser)``.
"""

from __future__ import annotations

from typing import Callable, Protocol, TypeVar

from wattle.ast_nodes import Id, Index, NameAnnotation
from wattle.errors import LookaheadError
from wattle.source import Span
from wattle.tokens import Token, TokenKind

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

_U32_MAX = 0xFFFF_FFFF


class Element(Protocol[T_co]):
    display: str

    def peek(self, parser: Parser, offset: int) -> bool: ...

    def parse(self, parser: Parser) -> T_co: ...


class Parser:
    """Cursor over a lexed token list."""

    def __init__(self, tokens: list[Token], filename: str = "<stdin>") -> None:
        self.tokens = tokens
        self.pos = 0
        self.filename = filename

    # ── Token access ─────────────────────────────────────────────

    def _current(self) -> Token:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return self.tokens[-1]  # EOF

    def token_at(self, offset: int) -> Token:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]

    def advance(self) -> Token:
        tok = self._current()
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def cur_span(self) -> Span:
        return self._current().span

    def at_eof(self) -> bool:
        return self._current().kind == TokenKind.EOF

    def is_empty(self) -> bool:
        """True when nothing is left in the current group."""
        return self._current().kind in (TokenKind.RPAREN, TokenKind.EOF)

    def error_expected(self, *expected: str) -> LookaheadError:
        tok = self._current()
        return LookaheadError(tuple(expected), tok.describe(), tok.span)

    # ── Lookahead ────────────────────────────────────────────────

    def peek(self, element: Element[object]) -> bool:
        return element.peek(self, 0)

    def peek2(self, element: Element[object]) -> bool:
        """Check the token after the next one."""
        return element.peek(self, 1)

    def peek_group(self, element: Element[object]) -> bool:
        """Check whether the next group opens with ``element``."""
        return self._current().kind == TokenKind.LPAREN and self.peek2(element)

    def lookahead1(self) -> Lookahead1:
        return Lookahead1(self)

    # ── Consumption ──────────────────────────────────────────────

    def parse(self, element: Element[T]) -> T:
        return element.parse(self)

    def parse_optional(self, element: Element[T]) -> T | None:
        if element.peek(self, 0):
            return element.parse(self)
        return None

    def parens(self, fn: Callable[[Parser], T]) -> T:
        """Run ``fn`` inside one group; the group must be exactly consumed."""
        self._expect(TokenKind.LPAREN, "`(`")
        result = fn(self)
        self._expect(TokenKind.RPAREN, "`)`")
        return result

    def _expect(self, kind: TokenKind, display: str) -> Token:
        if self._current().kind == kind:
            return self.advance()
        raise self.error_expected(display)


class Lookahead1:
    """Records each element peeked so a miss can list every alternative."""

    def __init__(self, parser: Parser) -> None:
        self.parser = parser
        self.attempts: list[str] = []

    def peek(self, element: Element[object]) -> bool:
        if element.peek(self.parser, 0):
            return True
        self.attempts.append(element.display)
        return False

    def error(self) -> LookaheadError:
        return self.parser.error_expected(*self.attempts)


# ── Elements ─────────────────────────────────────────────────────


class Keyword:
    """A reserved word such as ``i32`` or ``param``."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.display = f"`{name}`"

    def __repr__(self) -> str:
        return f"Keyword({self.name!r})"

    def peek(self, parser: Parser, offset: int) -> bool:
        tok = parser.token_at(offset)
        return tok.kind == TokenKind.KEYWORD and tok.value == self.name

    def parse(self, parser: Parser) -> Span:
        if not self.peek(parser, 0):
            raise parser.error_expected(self.display)
        return parser.advance().span


class _U32:
    display = "u32"

    def peek(self, parser: Parser, offset: int) -> bool:
        tok = parser.token_at(offset)
        if tok.kind != TokenKind.INTEGER or tok.value[0] in "+-":
            return False
        # Bound the digit count first; int() refuses very long decimal strings
        if _significant_digits(tok.value) > (8 if tok.value.startswith("0x") else 10):
            return False
        return _int_value(tok.value) <= _U32_MAX

    def parse(self, parser: Parser) -> int:
        if not self.peek(parser, 0):
            raise parser.error_expected(self.display)
        return _int_value(parser.advance().value)


class _Id:
    display = "identifier"

    def peek(self, parser: Parser, offset: int) -> bool:
        return parser.token_at(offset).kind == TokenKind.ID

    def parse(self, parser: Parser) -> Id:
        if not self.peek(parser, 0):
            raise parser.error_expected(self.display)
        tok = parser.advance()
        return Id(tok.value, tok.span)


class _String:
    display = "string"

    def peek(self, parser: Parser, offset: int) -> bool:
        return parser.token_at(offset).kind == TokenKind.STRING

    def parse(self, parser: Parser) -> str:
        if not self.peek(parser, 0):
            raise parser.error_expected(self.display)
        return parser.advance().value


class _NameAnnotation:
    display = "`(@name ...)`"

    def peek(self, parser: Parser, offset: int) -> bool:
        opener = parser.token_at(offset)
        tok = parser.token_at(offset + 1)
        return (opener.kind == TokenKind.LPAREN
                and tok.kind == TokenKind.ANNOTATION and tok.value == "name")

    def parse(self, parser: Parser) -> NameAnnotation:
        if not self.peek(parser, 0):
            raise parser.error_expected(self.display)
        start = parser.cur_span()

        def body(p: Parser) -> str:
            p.advance()  # @name
            return p.parse(STRING)

        name = parser.parens(body)
        return NameAnnotation(name, start)


class _Index:
    display = "index"

    def peek(self, parser: Parser, offset: int) -> bool:
        return U32.peek(parser, offset) or ID.peek(parser, offset)

    def parse(self, parser: Parser) -> Index:
        span = parser.cur_span()
        look = parser.lookahead1()
        if look.peek(U32):
            return Index(parser.parse(U32), span)
        if look.peek(ID):
            return Index(parser.parse(ID).name, span)
        raise look.error()


def _significant_digits(text: str) -> int:
    digits = text.lstrip("+-").replace("_", "")
    if digits.startswith("0x"):
        digits = digits[2:]
    return len(digits.lstrip("0"))


def _int_value(text: str) -> int:
    digits = text.lstrip("+-").replace("_", "")
    base = 10
    if digits.startswith("0x"):
        digits, base = digits[2:], 16
    value = int(digits.lstrip("0") or "0", base)
    return -value if text.startswith("-") else value


U32 = _U32()
ID = _Id()
STRING = _String()
NAME_ANNOTATION = _NameAnnotation()
INDEX = _Index()
