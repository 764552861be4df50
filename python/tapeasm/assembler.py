"""Compilation driver: parse, desugar, resolve, emit."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, TextIO

from .desugar import desugar
from .emitter import emit
from .nodes import Label, Statement
from .parser import parse
from .symbols import SymbolTable, resolve_symbols
from .tape import DEFAULT_TAPE_SIZE

LOGGER = logging.getLogger("tapeasm.assembler")

LISTING_INDENT = 4


@dataclass
class CompileOptions:
    capacity: int = DEFAULT_TAPE_SIZE
    expand: bool = False


@dataclass
class Assembly:
    tape: List[int]
    statements: List[Statement] = field(default_factory=list)
    symbols: Optional[SymbolTable] = None


def format_listing(statements: Iterable[Statement]) -> str:
    """Render statements one per line, indenting everything inside a block."""
    lines: List[str] = []
    indent = 0
    for stmt in statements:
        if isinstance(stmt, Label) and not stmt.is_local:
            lines.append(str(stmt))
            indent = LISTING_INDENT
        else:
            lines.append(" " * indent + str(stmt))
    return "\n".join(lines)


def assemble_statements(
    statements: Iterable[Statement],
    options: Optional[CompileOptions] = None,
    *,
    listing: Optional[TextIO] = None,
) -> Assembly:
    options = options or CompileOptions()
    desugared = list(desugar(statements))
    if options.expand:
        print(format_listing(desugared), file=listing or sys.stdout)
    symbols = resolve_symbols(desugared)
    tape = emit(desugared, symbols, options.capacity)
    LOGGER.info("assembled %d code cells into a %d cell tape", symbols.code_size, options.capacity)
    return Assembly(tape=tape, statements=desugared, symbols=symbols)


def assemble(
    source: str,
    options: Optional[CompileOptions] = None,
    *,
    listing: Optional[TextIO] = None,
) -> Assembly:
    """Compile assembly ``source`` into a tape image.

    Raises an ``AsmError`` subclass on the first problem found. With
    ``options.expand`` the desugared listing is printed to ``listing``
    (stdout by default) before symbols are resolved.
    """
    return assemble_statements(parse(source), options, listing=listing)


__all__ = ["CompileOptions", "Assembly", "format_listing", "assemble", "assemble_statements"]
