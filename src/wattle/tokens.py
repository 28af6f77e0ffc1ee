"""Token kinds and token representation for the wat lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wattle.source import Span


class TokenKind(Enum):
    # Punctuation
    LPAREN = auto()
    RPAREN = auto()

    # Words
    KEYWORD = auto()
    ID = auto()
    ANNOTATION = auto()

    # Literals
    INTEGER = auto()
    FLOAT = auto()
    STRING = auto()

    # Special
    EOF = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    span: Span

    def describe(self) -> str:
        """Short rendering used in "found X" error messages."""
        match self.kind:
            case TokenKind.EOF:
                return "end of input"
            case TokenKind.LPAREN:
                return "`(`"
            case TokenKind.RPAREN:
                return "`)`"
            case TokenKind.ID:
                return f"`${self.value}`"
            case TokenKind.ANNOTATION:
                return f"`@{self.value}`"
            case TokenKind.STRING:
                return f"string {self.value!r}"
            case _:
                return f"`{self.value}`"


# Characters allowed in keywords, ids and annotations after the first one.
IDCHARS: frozenset[str] = frozenset(
    "0123456789"
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "!#$%&'*+-./:<=>?@\\^_`|~"
)
