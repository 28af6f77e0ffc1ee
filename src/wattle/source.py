"""Source text and span tracking for diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Span:
    """A 1-indexed, inclusive range within a named source."""

    file: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    def __str__(self) -> str:
        return f"{self.file}:{self.start_line}:{self.start_col}"

    @property
    def is_single_line(self) -> bool:
        return self.start_line == self.end_line


class SourceFile:
    """Source text split into lines, from disk or from memory."""

    def __init__(self, name: str, content: str) -> None:
        self.name = name
        self.content = content
        self.lines = content.splitlines()

    @classmethod
    def load(cls, path: Path) -> SourceFile:
        return cls(str(path), path.read_text())

    def line_at(self, n: int) -> str:
        """Return the 1-indexed line, or empty string if out of range."""
        if 1 <= n <= len(self.lines):
            return self.lines[n - 1]
        return ""
