"""wattle language server: pygls-based LSP for .wat files.

Provides parse diagnostics, document symbols for module fields and
whole-document formatting via stdio transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from wattle import __version__
from wattle.ast_nodes import (
    Field,
    FuncDecl,
    GlobalDecl,
    MemoryDecl,
    TableDecl,
    TypeDecl,
    TypeModule,
)
from wattle.errors import CompileError, Diagnostic, Severity
from wattle.formatter import (
    WatFormatter,
    format_function_type,
    format_global_type,
    format_memory_type,
    format_table_type,
    format_type_use,
)
from wattle.module import parse_module

_SEVERITY_MAP = {
    Severity.ERROR: lsp.DiagnosticSeverity.Error,
}


def span_to_range(span: object) -> lsp.Range:
    """Convert a 1-indexed Span to a 0-indexed LSP Range."""
    sl = getattr(span, "start_line", 1)
    sc = getattr(span, "start_col", 1)
    el = getattr(span, "end_line", sl)
    ec = getattr(span, "end_col", sc)
    return lsp.Range(
        start=lsp.Position(line=sl - 1, character=sc - 1),
        end=lsp.Position(line=el - 1, character=ec),
    )


@dataclass
class DocumentState:
    source: str
    module: TypeModule | None = None
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)


# ── Server ────────────────────────────────────────────────────────

server = LanguageServer(
    "wattle-lsp", __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)
_state: dict[str, DocumentState] = {}


def _compile_diag(d: Diagnostic) -> lsp.Diagnostic:
    """Convert a wattle Diagnostic to an LSP Diagnostic."""
    span_range = lsp.Range(start=lsp.Position(0, 0), end=lsp.Position(0, 0))
    if d.labels:
        span_range = span_to_range(d.labels[0].span)
    return lsp.Diagnostic(
        range=span_range,
        severity=_SEVERITY_MAP.get(d.severity, lsp.DiagnosticSeverity.Error),
        source="wattle",
        code=d.code,
        message=f"[{d.code}] {d.message}",
    )


def _analyze(uri: str, source: str) -> DocumentState:
    """Lex and parse a document, cache the result, return its state."""
    ds = DocumentState(source=source)
    try:
        ds.module = parse_module(source, uri)
    except CompileError as e:
        ds.diagnostics = [_compile_diag(d) for d in e.diagnostics]
    _state[uri] = ds
    return ds


def _field_to_symbol(fld: Field) -> lsp.DocumentSymbol:
    """Convert a module field to an LSP DocumentSymbol."""
    if isinstance(fld, TypeDecl):
        kind, label, detail = lsp.SymbolKind.Interface, "type", format_function_type(fld.func)
    elif isinstance(fld, GlobalDecl):
        kind, label, detail = lsp.SymbolKind.Variable, "global", format_global_type(fld.ty)
    elif isinstance(fld, TableDecl):
        kind, label, detail = lsp.SymbolKind.Array, "table", format_table_type(fld.ty)
    elif isinstance(fld, MemoryDecl):
        kind, label, detail = lsp.SymbolKind.Object, "memory", format_memory_type(fld.ty)
    elif isinstance(fld, FuncDecl):
        kind, label, detail = lsp.SymbolKind.Function, "func", format_type_use(fld.type_use)
    else:
        raise TypeError(f"unknown field: {type(fld).__name__}")
    name = f"${fld.id.name}" if fld.id is not None else f"<{label}>"
    return lsp.DocumentSymbol(
        name=name,
        kind=kind,
        range=span_to_range(fld.span),
        selection_range=span_to_range(fld.span),
        detail=detail or None,
    )


# ── LSP Feature Handlers ─────────────────────────────────────────


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
    uri = params.text_document.uri
    ds = _analyze(uri, params.text_document.text)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    # Full sync: the last change holds the whole document
    source = params.content_changes[-1].text if params.content_changes else ""
    ds = _analyze(uri, source)
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
    _state.pop(params.text_document.uri, None)


@server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbol(params: lsp.DocumentSymbolParams) -> list[lsp.DocumentSymbol]:
    ds = _state.get(params.text_document.uri)
    if ds is None or ds.module is None:
        return []
    return [_field_to_symbol(f) for f in ds.module.fields]


@server.feature(lsp.TEXT_DOCUMENT_FORMATTING)
def formatting(params: lsp.DocumentFormattingParams) -> list[lsp.TextEdit] | None:
    ds = _state.get(params.text_document.uri)
    if ds is None or ds.module is None:
        return None
    formatted = WatFormatter().format(ds.module)
    if formatted == ds.source:
        return []
    line_count = len(ds.source.splitlines()) + 1
    return [lsp.TextEdit(
        range=lsp.Range(
            start=lsp.Position(line=0, character=0),
            end=lsp.Position(line=line_count, character=0),
        ),
        new_text=formatted,
    )]


# ── Entry point ──────────────────────────────────────────────────


def main() -> None:
    """Start the wattle language server on stdio."""
    server.start_io()
