"""Parse errors and Rust-style colored diagnostic rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from wattle.source import SourceFile, Span


class Severity(Enum):
    ERROR = "error"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",  # bold red
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    span: Span
    message: str


@dataclass
class Diagnostic:
    """A single diagnostic message with optional labels and notes."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class DiagnosticRenderer:
    """Renders diagnostics in Rust-style format with optional ANSI colors."""

    def __init__(self, *, color: bool = True) -> None:
        self.color = color
        self._sources: dict[str, SourceFile | None] = {}

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def remember_source(self, filename: str, source: str) -> None:
        """Register in-memory text (stdin, editor buffers) under ``filename``."""
        self._sources[filename] = SourceFile(filename, source)

    def _source_line(self, filename: str, line_num: int) -> str | None:
        if filename not in self._sources:
            path = Path(filename)
            try:
                self._sources[filename] = SourceFile.load(path) if path.is_file() else None
            except OSError:
                self._sources[filename] = None
        source = self._sources[filename]
        if source is None or not 1 <= line_num <= len(source.lines):
            return None
        return source.line_at(line_num)

    def _gutter(self, text: str = "") -> str:
        return f"  {self._c(_BLUE)}{text:>4} |{self._c(_RESET)}"

    def _render_label(self, label: DiagnosticLabel, color: str) -> list[str]:
        span = label.span
        out = [f"  {self._c(_BLUE)}-->{self._c(_RESET)} {span}", self._gutter()]
        source_line = self._source_line(span.file, span.start_line)
        if source_line is not None:
            out.append(f"{self._gutter(str(span.start_line))} {source_line}")
        if span.is_single_line:
            padding = " " * (span.start_col - 1)
            carets = "^" * max(1, span.end_col - span.start_col + 1)
            out.append(f"{self._gutter()} {padding}{self._c(color)}{carets}{self._c(_RESET)}")
        if label.message:
            out.append(f"{self._gutter()}   {self._c(color)}{label.message}{self._c(_RESET)}")
        return out

    def render(self, diag: Diagnostic) -> str:
        color = _COLORS[diag.severity]
        lines = [
            f"{self._c(color)}{diag.severity.value}[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        ]
        for label in diag.labels:
            lines.extend(self._render_label(label, color))
        lines.extend(f"  {self._c(_BLUE)}={self._c(_RESET)} note: {n}" for n in diag.notes)
        return "\n".join(lines)


class CompileError(Exception):
    """Batch error carrying multiple diagnostics."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = diagnostics
        messages = [d.message for d in diagnostics]
        super().__init__(f"{len(diagnostics)} error(s): {'; '.join(messages)}")


# ── Grammar errors ───────────────────────────────────────────────


class ParseError(Exception):
    """A grammar rule failed at ``span``; aborts the enclosing declaration."""

    code = "E200"

    def __init__(self, message: str, span: Span) -> None:
        super().__init__(message)
        self.message = message
        self.span = span

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(
            severity=Severity.ERROR,
            code=self.code,
            message=self.message,
            labels=[DiagnosticLabel(span=self.span, message="")],
        )


class LookaheadError(ParseError):
    """The next token matched none of the alternatives at a decision point."""

    code = "E200"

    def __init__(self, expected: tuple[str, ...], found: str, span: Span) -> None:
        self.expected = expected
        self.found = found
        if len(expected) == 1:
            wanted = expected[0]
        else:
            wanted = "one of {" + ", ".join(expected) + "}"
        super().__init__(f"expected {wanted}, found {found}", span)


class OrderError(ParseError):
    """A ``param`` group appeared after a ``result`` group."""

    code = "E201"

    def __init__(self, span: Span) -> None:
        super().__init__("cannot list params after results", span)

    def to_diagnostic(self) -> Diagnostic:
        diag = super().to_diagnostic()
        diag.notes.append("parameters must precede results in a signature")
        return diag
