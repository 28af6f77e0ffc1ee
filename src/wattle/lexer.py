"""Lexer for the WebAssembly text format.

Produces the flat token stream the parser's cursor walks over: parens,
keywords, ``$ids``, ``@annotations``, numbers and strings. Comments and
whitespace are dropped.
"""

from __future__ import annotations

import re

from wattle.errors import CompileError, Diagnostic, DiagnosticLabel, Severity
from wattle.source import Span
from wattle.tokens import IDCHARS, Token, TokenKind

_HEXNUM = r"[0-9a-fA-F](?:_?[0-9a-fA-F])*"
_NUM = r"[0-9](?:_?[0-9])*"
_INTEGER_RE = re.compile(rf"[+-]?(?:0x{_HEXNUM}|{_NUM})")
_FLOAT_RE = re.compile(
    rf"[+-]?(?:"
    rf"{_NUM}(?:\.(?:{_NUM})?)?(?:[eE][+-]?{_NUM})?"
    rf"|0x{_HEXNUM}(?:\.(?:{_HEXNUM})?)?(?:[pP][+-]?{_NUM})?"
    rf"|inf|nan(?::0x{_HEXNUM})?"
    rf")"
)

_ESCAPES = {
    "n": "\n", "t": "\t", "r": "\r",
    "\\": "\\", "'": "'", '"': '"',
}


class Lexer:
    """Tokenizes wat source text."""

    def __init__(
        self, source: str, filename: str = "<stdin>", max_depth: int | None = None,
    ) -> None:
        self.source = source
        self.filename = filename
        self.max_depth = max_depth
        self.pos = 0
        self.line = 1
        self.col = 1
        self.depth = 0
        self.tokens: list[Token] = []
        self.diagnostics: list[Diagnostic] = []

    def lex(self) -> list[Token]:
        """Tokenize the entire source and return the token list."""
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch in " \t\n\r":
                self._advance()
            elif ch == ";" and self._peek(1) == ";":
                self._skip_line_comment()
            elif ch == "(" and self._peek(1) == ";":
                self._skip_block_comment()
            elif ch == "(":
                self._lex_lparen()
            elif ch == ")":
                self._lex_rparen()
            elif ch == '"':
                self._lex_string()
            elif ch in IDCHARS:
                self._lex_word()
            else:
                self._error(f"unexpected character: {ch!r}", self.line, self.col)
                self._advance()

        if self.depth > 0:
            self._error("unclosed `(` at end of input", self.line, self.col)

        self._emit(TokenKind.EOF, "", self.line, self.col)

        if self.diagnostics:
            raise CompileError(self.diagnostics)
        return self.tokens

    # ── Helpers ───────────────────────────────────────────────────

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return "\0"

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _emit(self, kind: TokenKind, value: str, start_line: int, start_col: int) -> Token:
        end_col = self.col - 1 if self.col > 1 else 1
        span = Span(self.filename, start_line, start_col, self.line, end_col)
        tok = Token(kind, value, span)
        self.tokens.append(tok)
        return tok

    def _error(self, message: str, line: int, col: int) -> None:
        span = Span(self.filename, line, col, line, col)
        self.diagnostics.append(
            Diagnostic(
                severity=Severity.ERROR,
                code="E100",
                message=message,
                labels=[DiagnosticLabel(span=span, message="")],
            )
        )

    # ── Comments ─────────────────────────────────────────────────

    def _skip_line_comment(self) -> None:
        while self.pos < len(self.source) and self.source[self.pos] != "\n":
            self._advance()

    def _skip_block_comment(self) -> None:
        start_line = self.line
        start_col = self.col
        self._advance()
        self._advance()
        nesting = 1
        while self.pos < len(self.source):
            if self.source[self.pos] == "(" and self._peek(1) == ";":
                self._advance()
                self._advance()
                nesting += 1
            elif self.source[self.pos] == ";" and self._peek(1) == ")":
                self._advance()
                self._advance()
                nesting -= 1
                if nesting == 0:
                    return
            else:
                self._advance()
        self._error("unterminated block comment", start_line, start_col)

    # ── Parens ───────────────────────────────────────────────────

    def _lex_lparen(self) -> None:
        start_line = self.line
        start_col = self.col
        self._advance()
        self.depth += 1
        if self.max_depth is not None and self.depth == self.max_depth + 1:
            self._error(
                f"nesting deeper than the configured limit of {self.max_depth}",
                start_line, start_col,
            )
        self._emit(TokenKind.LPAREN, "(", start_line, start_col)

    def _lex_rparen(self) -> None:
        start_line = self.line
        start_col = self.col
        self._advance()
        if self.depth == 0:
            self._error("unbalanced `)`", start_line, start_col)
            return
        self.depth -= 1
        self._emit(TokenKind.RPAREN, ")", start_line, start_col)

    # ── Strings ──────────────────────────────────────────────────

    def _lex_string(self) -> None:
        start_line = self.line
        start_col = self.col
        self._advance()  # skip opening "
        buf = bytearray()

        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch == '"':
                self._advance()
                try:
                    text = buf.decode("utf-8")
                except UnicodeDecodeError:
                    self._error("string is not valid UTF-8", start_line, start_col)
                    return
                self._emit(TokenKind.STRING, text, start_line, start_col)
                return
            if ch == "\n":
                break
            if ch == "\\":
                buf.extend(self._lex_escape_sequence())
            else:
                buf.extend(self._advance().encode("utf-8"))

        self._error("unterminated string literal", start_line, start_col)

    def _lex_escape_sequence(self) -> bytes:
        esc_line = self.line
        esc_col = self.col
        self._advance()  # skip backslash
        if self.pos >= len(self.source):
            self._error("unexpected end of escape sequence", esc_line, esc_col)
            return b""
        ch = self._advance()
        if ch in _ESCAPES:
            return _ESCAPES[ch].encode("utf-8")
        if ch == "u" and self._peek() == "{":
            self._advance()
            digits = []
            while self.pos < len(self.source) and self.source[self.pos] != "}":
                digits.append(self._advance())
            if self.pos < len(self.source):
                self._advance()
            try:
                return chr(int("".join(digits), 16)).encode("utf-8")
            except (ValueError, OverflowError, UnicodeEncodeError):
                self._error("malformed unicode escape", esc_line, esc_col)
                return b""
        hi, lo = ch, self._peek()
        if hi in "0123456789abcdefABCDEF" and lo in "0123456789abcdefABCDEF":
            self._advance()
            return bytes([int(hi + lo, 16)])
        self._error(f"unknown escape sequence: \\{ch}", esc_line, esc_col)
        return b""

    # ── Words: keywords, ids, annotations, numbers ───────────────

    def _lex_word(self) -> None:
        start_line = self.line
        start_col = self.col
        text = []
        while self.pos < len(self.source) and self.source[self.pos] in IDCHARS:
            text.append(self._advance())
        word = "".join(text)

        if word[0] in "$@":
            kind = TokenKind.ID if word[0] == "$" else TokenKind.ANNOTATION
            if len(word) == 1:
                self._error(f"empty name after `{word}`", start_line, start_col)
                return
            self._emit(kind, word[1:], start_line, start_col)
        elif _INTEGER_RE.fullmatch(word):
            self._emit(TokenKind.INTEGER, word, start_line, start_col)
        elif _FLOAT_RE.fullmatch(word):
            self._emit(TokenKind.FLOAT, word, start_line, start_col)
        elif "a" <= word[0] <= "z":
            self._emit(TokenKind.KEYWORD, word, start_line, start_col)
        else:
            self._error(f"unknown token: {word!r}", start_line, start_col)
