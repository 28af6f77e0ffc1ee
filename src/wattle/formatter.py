"""Pretty-printer for the wat type grammar.

Walks parsed nodes and emits canonical shorthand text: consecutive
anonymous parameters share one ``(param ...)`` group, every named
parameter gets a group of its own, and results share one
``(result ...)`` group. Legacy spellings such as ``anyfunc`` come out as
their canonical keyword. Comments are not preserved.
"""

from __future__ import annotations

from wattle.ast_nodes import (
    ElemType,
    Field,
    FuncDecl,
    FunctionType,
    GlobalDecl,
    GlobalType,
    Id,
    Index,
    Limits,
    MemoryDecl,
    MemoryType,
    NameAnnotation,
    Param,
    TableDecl,
    TableType,
    TypeDecl,
    TypeModule,
    TypeUse,
    ValType,
)


def format_valtype(ty: ValType) -> str:
    return ty.value


def format_elemtype(ty: ElemType) -> str:
    return ty.value


def format_limits(limits: Limits) -> str:
    if limits.max is None:
        return str(limits.min)
    return f"{limits.min} {limits.max}"


def format_global_type(ty: GlobalType) -> str:
    if ty.mutable:
        return f"(mut {format_valtype(ty.ty)})"
    return format_valtype(ty.ty)


def format_table_type(ty: TableType) -> str:
    return f"{format_limits(ty.limits)} {format_elemtype(ty.elem)}"


def format_memory_type(ty: MemoryType) -> str:
    text = format_limits(ty.limits)
    return f"{text} shared" if ty.shared else text


def format_string(text: str) -> str:
    out = ['"']
    for ch in text:
        if ch in '"\\':
            out.append("\\" + ch)
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\t":
            out.append("\\t")
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\{ord(ch):02x}")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


def _format_id(ident: Id | None) -> str:
    return f" ${ident.name}" if ident is not None else ""


def _format_name(name: NameAnnotation) -> str:
    return f"(@name {format_string(name.name)})"


def _format_named_param(param: Param) -> str:
    parts = ["param"]
    if param.id is not None:
        parts.append(f"${param.id.name}")
    if param.name is not None:
        parts.append(_format_name(param.name))
    parts.append(format_valtype(param.ty))
    return "(" + " ".join(parts) + ")"


def format_function_type(ty: FunctionType) -> str:
    """Render the signature groups, or ``""`` for an empty signature."""
    groups: list[str] = []
    pending: list[str] = []
    for param in ty.params:
        if param.is_named:
            if pending:
                groups.append("(param " + " ".join(pending) + ")")
                pending = []
            groups.append(_format_named_param(param))
        else:
            pending.append(format_valtype(param.ty))
    if pending:
        groups.append("(param " + " ".join(pending) + ")")
    if ty.results:
        groups.append("(result " + " ".join(format_valtype(r) for r in ty.results) + ")")
    return " ".join(groups)


def format_index(index: Index) -> str:
    if index.is_symbolic:
        return f"${index.value}"
    return str(index.value)


def format_type_use(use: TypeUse) -> str:
    parts: list[str] = []
    if use.index is not None:
        parts.append(f"(type {format_index(use.index)})")
    sig = format_function_type(use.func)
    if sig:
        parts.append(sig)
    return " ".join(parts)


class WatFormatter:
    """Format a parsed TypeModule back to canonical source text."""

    def __init__(self, indent: str = "  ") -> None:
        self.indent = indent

    def format(self, module: TypeModule) -> str:
        fields = [self.format_field(f) for f in module.fields]
        if module.id is None:
            result = "\n".join(fields)
        else:
            header = f"(module{_format_id(module.id)}"
            if fields:
                body = "\n".join(self.indent + f for f in fields)
                result = f"{header}\n{body})"
            else:
                result = header + ")"
        if not result.endswith("\n"):
            result += "\n"
        return result

    def format_field(self, field: Field) -> str:
        if isinstance(field, TypeDecl):
            sig = format_function_type(field.func)
            func = f"(func {sig})" if sig else "(func)"
            return f"(type{_format_id(field.id)} {func})"
        if isinstance(field, GlobalDecl):
            return f"(global{_format_id(field.id)} {format_global_type(field.ty)})"
        if isinstance(field, TableDecl):
            return f"(table{_format_id(field.id)} {format_table_type(field.ty)})"
        if isinstance(field, MemoryDecl):
            return f"(memory{_format_id(field.id)} {format_memory_type(field.ty)})"
        if isinstance(field, FuncDecl):
            use = format_type_use(field.type_use)
            return f"(func{_format_id(field.id)}{' ' + use if use else ''})"
        raise TypeError(f"unknown field: {type(field).__name__}")
