"""Node definitions for the wat type grammar.

Every node is immutable once its owning declaration has been parsed.
Symbolic references (``$name``) are stored as-is in :class:`Index` and are
left for a module-wide resolution pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from wattle.source import Span

# ── Primitive types ──────────────────────────────────────────────


class ValType(Enum):
    """Value types; the enum value is the canonical keyword."""

    I32 = "i32"
    I64 = "i64"
    F32 = "f32"
    F64 = "f64"
    ANYREF = "anyref"
    FUNCREF = "funcref"
    V128 = "v128"
    NULLREF = "nullref"


class ElemType(Enum):
    """Element types a table may hold."""

    FUNCREF = "funcref"
    ANYREF = "anyref"
    NULLREF = "nullref"


# ── References ───────────────────────────────────────────────────


@dataclass(frozen=True)
class Id:
    """A ``$name`` identifier, stored without the ``$``."""

    name: str
    span: Span


@dataclass(frozen=True)
class NameAnnotation:
    """An ``(@name "...")`` display name for the custom name section."""

    name: str
    span: Span


@dataclass(frozen=True)
class Index:
    """A numeric or symbolic reference, resolved by a later pass."""

    value: int | str
    span: Span

    @property
    def is_symbolic(self) -> bool:
        return isinstance(self.value, str)


# ── Composite declarations ───────────────────────────────────────


@dataclass(frozen=True)
class Limits:
    min: int
    max: int | None = None


@dataclass(frozen=True)
class GlobalType:
    ty: ValType
    mutable: bool = False


@dataclass(frozen=True)
class TableType:
    limits: Limits
    elem: ElemType


@dataclass(frozen=True)
class MemoryType:
    limits: Limits
    shared: bool = False


# ── Signatures ───────────────────────────────────────────────────


@dataclass(frozen=True)
class Param:
    """A parameter; ``id`` and ``name`` are only set for the named form."""

    ty: ValType
    id: Id | None = None
    name: NameAnnotation | None = None

    @property
    def is_named(self) -> bool:
        return self.id is not None or self.name is not None


@dataclass(frozen=True)
class FunctionType:
    """Ordered parameters and results; order is call-site order."""

    params: tuple[Param, ...] = ()
    results: tuple[ValType, ...] = ()

    def is_empty(self) -> bool:
        return not self.params and not self.results

    def param_types(self) -> tuple[ValType, ...]:
        return tuple(p.ty for p in self.params)


@dataclass(frozen=True)
class TypeDecl:
    """A module-level ``(type $id? (func ...))`` declaration."""

    id: Id | None
    func: FunctionType
    span: Span


@dataclass(frozen=True)
class TypeUse:
    """A signature given by reference, inline, or both.

    ``index`` and ``func`` are not checked against each other here; a
    later resolution pass reconciles them.
    """

    index: Index | None
    index_span: Span | None
    func: FunctionType


# ── Module fields ────────────────────────────────────────────────


@dataclass(frozen=True)
class GlobalDecl:
    id: Id | None
    ty: GlobalType
    span: Span


@dataclass(frozen=True)
class TableDecl:
    id: Id | None
    ty: TableType
    span: Span


@dataclass(frozen=True)
class MemoryDecl:
    id: Id | None
    ty: MemoryType
    span: Span


@dataclass(frozen=True)
class FuncDecl:
    """A function header; bodies are not part of this grammar."""

    id: Id | None
    type_use: TypeUse
    span: Span


Field = Union[TypeDecl, GlobalDecl, TableDecl, MemoryDecl, FuncDecl]


@dataclass(frozen=True)
class TypeModule:
    id: Id | None
    fields: list[Field]
    span: Span

    def types(self) -> list[TypeDecl]:
        return [f for f in self.fields if isinstance(f, TypeDecl)]
