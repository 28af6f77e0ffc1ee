"""Shared test helpers for the wattle test suite."""

from __future__ import annotations

from wattle.ast_nodes import FunctionType, ValType
from wattle.lexer import Lexer
from wattle.parser import Parser
from wattle.types import FunctionTypeBuilder


def parser_for(source: str) -> Parser:
    return Parser(Lexer(source, "test.wat").lex(), "test.wat")


def parse_with(rule, source: str):
    """Run one grammar rule and require that it consumed everything."""
    parser = parser_for(source)
    result = rule(parser)
    assert parser.at_eof(), f"unconsumed input at {parser.cur_span()}"
    return result


def signature(source: str, allow_names: bool = True) -> FunctionType:
    """Fold the param/result groups of source into a FunctionType."""
    builder = FunctionTypeBuilder(allow_names)
    parser = parser_for(source)
    builder.parse_groups(parser)
    assert parser.at_eof(), f"unconsumed input at {parser.cur_span()}"
    return builder.finish()


def shape(func: FunctionType) -> tuple[list[tuple[ValType, str | None]], list[ValType]]:
    """Param (type, id) pairs and result types, without spans."""
    params = [(p.ty, p.id.name if p.id else None) for p in func.params]
    return params, list(func.results)
