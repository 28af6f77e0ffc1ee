"""Recursive-descent rules for the wat type grammar.

Covers value and element types, limits, global/table/memory types,
function signatures and type-uses. Every rule consumes tokens strictly
left to right; decisions are made with at most two tokens of lookahead
and any failure propagates to the caller unchanged.
"""

from __future__ import annotations

from wattle.ast_nodes import (
    ElemType,
    FunctionType,
    GlobalType,
    Limits,
    MemoryType,
    Param,
    TableType,
    TypeDecl,
    TypeUse,
    ValType,
)
from wattle.errors import OrderError
from wattle.parser import (
    ID,
    INDEX,
    NAME_ANNOTATION,
    U32,
    Keyword,
    Parser,
)

KW_FUNC = Keyword("func")
KW_MUT = Keyword("mut")
KW_PARAM = Keyword("param")
KW_RESULT = Keyword("result")
KW_SHARED = Keyword("shared")
KW_TYPE = Keyword("type")

# Accepted as `funcref` but never offered in an "expected" list.
KW_ANYFUNC = Keyword("anyfunc")

_VALTYPE_KEYWORDS: dict[ValType, Keyword] = {vt: Keyword(vt.value) for vt in ValType}
_ELEMTYPE_KEYWORDS: dict[ElemType, Keyword] = {et: Keyword(et.value) for et in ElemType}


# ── Primitive types ──────────────────────────────────────────────


def peek_valtype(parser: Parser) -> bool:
    return KW_ANYFUNC.peek(parser, 0) or any(
        kw.peek(parser, 0) for kw in _VALTYPE_KEYWORDS.values()
    )


def parse_valtype(parser: Parser) -> ValType:
    if parser.peek(KW_ANYFUNC):
        parser.parse(KW_ANYFUNC)
        return ValType.FUNCREF
    look = parser.lookahead1()
    for vt, kw in _VALTYPE_KEYWORDS.items():
        if look.peek(kw):
            parser.parse(kw)
            return vt
    raise look.error()


def peek_elemtype(parser: Parser) -> bool:
    """Lookahead for an element type; must agree with :func:`parse_elemtype`."""
    return KW_ANYFUNC.peek(parser, 0) or any(
        kw.peek(parser, 0) for kw in _ELEMTYPE_KEYWORDS.values()
    )


def parse_elemtype(parser: Parser) -> ElemType:
    if parser.peek(KW_ANYFUNC):
        parser.parse(KW_ANYFUNC)
        return ElemType.FUNCREF
    look = parser.lookahead1()
    for et, kw in _ELEMTYPE_KEYWORDS.items():
        if look.peek(kw):
            parser.parse(kw)
            return et
    raise look.error()


# ── Composite declarations ───────────────────────────────────────


def parse_limits(parser: Parser) -> Limits:
    # A bare integer right after the minimum can only be the maximum.
    minimum = parser.parse(U32)
    maximum = parser.parse(U32) if parser.peek(U32) else None
    return Limits(minimum, maximum)


def parse_global_type(parser: Parser) -> GlobalType:
    if parser.peek_group(KW_MUT):
        def mutable(p: Parser) -> GlobalType:
            p.parse(KW_MUT)
            return GlobalType(parse_valtype(p), mutable=True)

        return parser.parens(mutable)
    return GlobalType(parse_valtype(parser), mutable=False)


def parse_table_type(parser: Parser) -> TableType:
    limits = parse_limits(parser)
    return TableType(limits, parse_elemtype(parser))


def parse_memory_type(parser: Parser) -> MemoryType:
    limits = parse_limits(parser)
    shared = parser.parse_optional(KW_SHARED) is not None
    return MemoryType(limits, shared)


# ── Signatures ───────────────────────────────────────────────────


def peek_signature_group(parser: Parser) -> bool:
    return parser.peek_group(KW_PARAM) or parser.peek_group(KW_RESULT)


class FunctionTypeBuilder:
    """Accumulates ``(param ...)`` and ``(result ...)`` groups.

    ``allow_names`` is fixed for the whole signature. When it is false a
    leading ``$id`` inside a param group is not special-cased: it simply
    fails the value-type parse that follows.
    """

    def __init__(self, allow_names: bool = True) -> None:
        self.allow_names = allow_names
        self.params: list[Param] = []
        self.results: list[ValType] = []

    def parse_groups(self, parser: Parser) -> None:
        while peek_signature_group(parser):
            parser.parens(self._parse_group)

    def _parse_group(self, parser: Parser) -> None:
        look = parser.lookahead1()
        if look.peek(KW_PARAM):
            if self.results:
                raise OrderError(parser.cur_span())
            parser.parse(KW_PARAM)
            self._parse_params(parser)
        elif look.peek(KW_RESULT):
            parser.parse(KW_RESULT)
            while not parser.is_empty():
                self.results.append(parse_valtype(parser))
        else:
            raise look.error()

    def _parse_params(self, parser: Parser) -> None:
        if parser.is_empty():
            return
        ident = name = None
        if self.allow_names:
            ident = parser.parse_optional(ID)
            name = parser.parse_optional(NAME_ANNOTATION)
        if ident is not None or name is not None:
            # Named form binds exactly one type; parens() rejects extras.
            self.params.append(Param(parse_valtype(parser), ident, name))
            return
        self.params.append(Param(parse_valtype(parser)))
        while not parser.is_empty():
            self.params.append(Param(parse_valtype(parser)))

    def finish(self) -> FunctionType:
        return FunctionType(tuple(self.params), tuple(self.results))


def parse_function_type(parser: Parser) -> FunctionType:
    """Parse ``func`` followed by its signature groups."""
    parser.parse(KW_FUNC)
    builder = FunctionTypeBuilder(allow_names=True)
    builder.parse_groups(parser)
    return builder.finish()


def parse_type_decl(parser: Parser) -> TypeDecl:
    """Parse the inside of a ``(type $id? (func ...))`` form."""
    span = parser.parse(KW_TYPE)
    ident = parser.parse_optional(ID)
    func = parser.parens(parse_function_type)
    return TypeDecl(ident, func, span)


# ── Type-use ─────────────────────────────────────────────────────


def parse_type_use(parser: Parser, allow_names: bool = True) -> TypeUse:
    """Parse an optional ``(type <index>)`` then an optional inline signature."""
    index = index_span = None
    if parser.peek_group(KW_TYPE):
        def reference(p: Parser) -> None:
            nonlocal index, index_span
            p.parse(KW_TYPE)
            index_span = p.cur_span()
            index = p.parse(INDEX)

        parser.parens(reference)

    builder = FunctionTypeBuilder(allow_names)
    if peek_signature_group(parser):
        builder.parse_groups(parser)
    return TypeUse(index, index_span, builder.finish())


def parse_type_use_no_names(parser: Parser) -> TypeUse:
    """Type-use for sites where inline params may not bind identifiers."""
    return parse_type_use(parser, allow_names=False)
