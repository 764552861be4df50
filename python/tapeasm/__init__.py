"""
tapeasm: assembler for the tape machine.

Source text is compiled into a fixed-size list of signed 32-bit cells: code
and explicit literals from cell 0, referenced data appended right after the
code. Use ``python -m tapeasm compile prog.asm`` or :func:`assemble`.
"""

from __future__ import annotations

from .assembler import Assembly, CompileOptions, assemble, format_listing
from .cli import main
from .errors import (
    AsmError,
    AsmSyntaxError,
    LocalLabelOutsideBlock,
    NoParentLabel,
    TapeOverflow,
    UndefinedLabel,
    UnresolvedCompileTimeDeref,
)

__all__ = [
    "Assembly",
    "CompileOptions",
    "assemble",
    "format_listing",
    "main",
    "AsmError",
    "AsmSyntaxError",
    "LocalLabelOutsideBlock",
    "NoParentLabel",
    "TapeOverflow",
    "UndefinedLabel",
    "UnresolvedCompileTimeDeref",
]
__version__ = "0.1.0"
