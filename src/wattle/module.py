"""Module-level container grammar.

A source file holds an optional ``(module $id? ...)`` wrapper around a
sequence of fields. Only fields whose whole shape is type grammar are
accepted: ``type``, ``global``, ``table``, ``memory`` and function
headers. Initializers and function bodies belong to the wider module
grammar and are rejected here.
"""

from __future__ import annotations

from wattle.ast_nodes import (
    Field,
    FuncDecl,
    GlobalDecl,
    MemoryDecl,
    TableDecl,
    TypeModule,
)
from wattle.errors import CompileError, ParseError
from wattle.lexer import Lexer
from wattle.parser import ID, Keyword, Parser
from wattle.source import Span
from wattle.types import (
    KW_FUNC,
    KW_TYPE,
    parse_global_type,
    parse_memory_type,
    parse_table_type,
    parse_type_decl,
    parse_type_use,
)

KW_MODULE = Keyword("module")
KW_GLOBAL = Keyword("global")
KW_TABLE = Keyword("table")
KW_MEMORY = Keyword("memory")


def _parse_global(parser: Parser) -> GlobalDecl:
    span = parser.parse(KW_GLOBAL)
    return GlobalDecl(parser.parse_optional(ID), parse_global_type(parser), span)


def _parse_table(parser: Parser) -> TableDecl:
    span = parser.parse(KW_TABLE)
    return TableDecl(parser.parse_optional(ID), parse_table_type(parser), span)


def _parse_memory(parser: Parser) -> MemoryDecl:
    span = parser.parse(KW_MEMORY)
    return MemoryDecl(parser.parse_optional(ID), parse_memory_type(parser), span)


def _parse_func(parser: Parser) -> FuncDecl:
    span = parser.parse(KW_FUNC)
    ident = parser.parse_optional(ID)
    return FuncDecl(ident, parse_type_use(parser), span)


def parse_field(parser: Parser) -> Field:
    """Parse the inside of one module field group."""
    look = parser.lookahead1()
    if look.peek(KW_TYPE):
        return parse_type_decl(parser)
    if look.peek(KW_GLOBAL):
        return _parse_global(parser)
    if look.peek(KW_TABLE):
        return _parse_table(parser)
    if look.peek(KW_MEMORY):
        return _parse_memory(parser)
    if look.peek(KW_FUNC):
        return _parse_func(parser)
    raise look.error()


def _parse_fields(parser: Parser) -> list[Field]:
    fields: list[Field] = []
    while not parser.is_empty():
        fields.append(parser.parens(parse_field))
    return fields


def parse_tokens(parser: Parser) -> TypeModule:
    """Parse a whole token stream; raises :class:`ParseError` on the first error."""
    start = parser.cur_span()
    ident = None
    if parser.peek_group(KW_MODULE):
        def wrapped(p: Parser) -> list[Field]:
            nonlocal ident
            p.parse(KW_MODULE)
            ident = p.parse_optional(ID)
            return _parse_fields(p)

        fields = parser.parens(wrapped)
    else:
        fields = _parse_fields(parser)

    if not parser.at_eof():
        raise parser.error_expected("end of input")

    end = parser.cur_span()
    span = Span(parser.filename, start.start_line, start.start_col, end.end_line, end.end_col)
    return TypeModule(ident, fields, span)


def parse_module(
    source: str, filename: str = "<stdin>", max_depth: int | None = None,
) -> TypeModule:
    """Lex and parse ``source``; any failure surfaces as :class:`CompileError`."""
    tokens = Lexer(source, filename, max_depth=max_depth).lex()
    try:
        return parse_tokens(Parser(tokens, filename))
    except ParseError as e:
        raise CompileError([e.to_diagnostic()]) from e
