"""First pass: tape offsets, blocks and local label tables."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import LocalLabelOutsideBlock, NoParentLabel, Span, UndefinedLabel
from .nodes import ArgLabel, Instruction, Label, LiteralStatement, Statement, is_local_name

LOGGER = logging.getLogger("tapeasm.symbols")


@dataclass
class Block:
    """Scope opened by a global label."""

    name: str
    start: int
    labels: Dict[str, int] = field(default_factory=dict)


@dataclass
class SymbolTable:
    blocks: Dict[str, Block]
    scopes: List[Block]
    code_size: int

    def lookup(self, name: str, active: Optional[Block], span: Optional[Span] = None) -> int:
        """Absolute tape offset of ``name`` as seen from the ``active`` block."""
        if is_local_name(name):
            if active is None:
                raise LocalLabelOutsideBlock(f'local label "{name}" used outside of any block', span)
            offset = active.labels.get(name)
            if offset is None:
                raise UndefinedLabel(f'label "{name}" used but not defined in block "{active.name}"', span)
            return offset
        block = self.blocks.get(name)
        if block is None:
            raise UndefinedLabel(f'label "{name}" used but not defined', span)
        return block.start


def scan_blocks(stream: Iterable[Statement]) -> Iterator[Tuple[Statement, Optional[int]]]:
    """Pair each statement with the ordinal of the block open at that point.

    Global labels open the next ordinal themselves. Statements before the
    first global label get ``None``. Both passes walk the stream through this
    helper so they agree on block boundaries.
    """
    scope: Optional[int] = None
    for stmt in stream:
        if isinstance(stmt, Label) and not stmt.is_local:
            scope = 0 if scope is None else scope + 1
        yield stmt, scope


def statement_size(stmt: Statement) -> int:
    if isinstance(stmt, (Instruction, LiteralStatement)):
        return stmt.size
    return 0


def resolve_symbols(stream: Iterable[Statement]) -> SymbolTable:
    scopes: List[Block] = []
    blocks: Dict[str, Block] = {}
    off = 0
    for stmt, scope in scan_blocks(stream):
        if isinstance(stmt, Label):
            if not stmt.is_local:
                if stmt.name in blocks:
                    LOGGER.warning("global label %r redefined at offset %d; last definition wins", stmt.name, off)
                block = Block(stmt.name, off)
                blocks[stmt.name] = block
                scopes.append(block)
                LOGGER.debug("block %s opens at %d", stmt.name, off)
            elif scope is None:
                raise NoParentLabel(f'local label "{stmt.name}" has no parent label', stmt.span)
            else:
                scopes[scope].labels[stmt.name] = off
        elif isinstance(stmt, Instruction):
            off += 1
            for arg in stmt.args:
                if isinstance(arg, ArgLabel):
                    if scope is None:
                        raise NoParentLabel(f'local label "{arg.name}" has no parent label', arg.span)
                    scopes[scope].labels[arg.name] = off
                off += 1
        else:
            off += statement_size(stmt)
    LOGGER.debug("code size %d cells in %d block(s)", off, len(scopes))
    return SymbolTable(blocks=blocks, scopes=scopes, code_size=off)


__all__ = ["Block", "SymbolTable", "scan_blocks", "statement_size", "resolve_symbols"]
