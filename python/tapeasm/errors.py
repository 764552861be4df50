"""Assembler diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Span:
    """Source range: character offsets plus the 1-based line/column of start."""

    start: int
    end: int
    line: int = 1
    column: int = 1

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class AsmError(ValueError):
    """Base class for every fatal assembly error."""

    def __init__(self, message: str, span: Optional[Span] = None) -> None:
        super().__init__(message)
        self.message = message
        self.span = span

    def __str__(self) -> str:
        if self.span is None:
            return self.message
        return f"{self.span}: {self.message}"


class AsmSyntaxError(AsmError):
    """Malformed source text or an illegal node shape."""


class NoParentLabel(AsmError):
    """A local label is declared or used before any global label."""


class LocalLabelOutsideBlock(AsmError):
    """A local label is resolved while no block is active during emission."""


class UndefinedLabel(AsmError):
    """A label is referenced but never declared in the relevant scope."""


class UnresolvedCompileTimeDeref(AsmError):
    """A dereference targets a tape cell that has not been written yet."""


class TapeOverflow(AsmError):
    """A write would run past the tape capacity or into the other region."""


def format_diagnostic(error: AsmError, source: str = "", filename: str = "<input>") -> str:
    """Render ``error`` as ``file:line:col: error: message`` plus a caret line."""
    span = error.span
    if span is None:
        return f"{filename}: error: {error.message}"
    lines = [f"{filename}:{span.line}:{span.column}: error: {error.message}"]
    source_lines = source.splitlines()
    if 0 < span.line <= len(source_lines):
        text = source_lines[span.line - 1]
        width = max(1, min(span.end - span.start, len(text) - span.column + 1))
        lines.append(f"    {text}")
        lines.append("    " + " " * (span.column - 1) + "^" * width)
    return "\n".join(lines)


__all__ = [
    "Span",
    "AsmError",
    "AsmSyntaxError",
    "NoParentLabel",
    "LocalLabelOutsideBlock",
    "UndefinedLabel",
    "UnresolvedCompileTimeDeref",
    "TapeOverflow",
    "format_diagnostic",
]
