"""Second pass: write opcodes, operands and literal data into the tape."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .errors import AsmSyntaxError
from .nodes import (
    ArgLabel,
    Argument,
    Char,
    Deref,
    Instruction,
    Label,
    LabelRef,
    Literal,
    LiteralStatement,
    Number,
    Ref,
    Statement,
    String,
)
from .symbols import Block, SymbolTable, scan_blocks
from .tape import DEFAULT_TAPE_SIZE, TapeImage

LOGGER = logging.getLogger("tapeasm.emitter")


class TapeBuilder:
    def __init__(self, symbols: SymbolTable, capacity: int = DEFAULT_TAPE_SIZE) -> None:
        self.symbols = symbols
        self.tape = TapeImage(capacity, symbols.code_size)
        self.active: Optional[Block] = None

    def activate(self, scope: Optional[int]) -> None:
        self.active = None if scope is None else self.symbols.scopes[scope]

    def resolve(self, expr: Literal) -> int:
        """Evaluate a literal expression, appending any data it references."""
        if isinstance(expr, Number):
            return expr.value
        if isinstance(expr, Char):
            return expr.code
        if isinstance(expr, LabelRef):
            return self.symbols.lookup(expr.name, self.active, expr.span)
        if isinstance(expr, Ref):
            operand = expr.operand
            if isinstance(operand, String):
                addr = self.tape.data.append_text(operand.value, operand.span)
                LOGGER.debug("string %s stored at %d", operand, addr)
                return addr
            value = self.resolve(operand)
            return self.tape.data.append(value, expr.span)
        if isinstance(expr, Deref):
            operand = expr.operand
            if isinstance(operand, LabelRef):
                addr = self.symbols.lookup(operand.name, self.active, operand.span)
            else:
                addr = self.resolve(operand)
            return self.tape.read(addr, expr.span)
        # Strings are only reachable through Ref; nodes reject other placements.
        raise AsmSyntaxError(f"literal {expr} cannot be used as a value", getattr(expr, "span", None))

    def argument(self, arg: Argument) -> int:
        if isinstance(arg, ArgLabel):
            return self.symbols.lookup(arg.name, self.active, arg.span)
        return self.resolve(arg)

    def instruction(self, inst: Instruction) -> None:
        self.tape.code.append(int(inst.opcode), inst.span)
        for arg in inst.args:
            # Resolve first: a Ref argument appends to the data region.
            value = self.argument(arg)
            self.tape.code.append(value, arg.span or inst.span)

    def literal(self, stmt: LiteralStatement) -> None:
        if isinstance(stmt.value, String):
            self.tape.code.append_text(stmt.value.value, stmt.span)
        else:
            self.tape.code.append(self.resolve(stmt.value), stmt.span)

    def build(self, stream: Iterable[Statement]) -> List[int]:
        for stmt, scope in scan_blocks(stream):
            if isinstance(stmt, Label):
                if not stmt.is_local:
                    self.activate(scope)
            elif isinstance(stmt, Instruction):
                self.instruction(stmt)
            else:
                self.literal(stmt)
        LOGGER.debug(
            "emitted %d code cells and %d data cells",
            self.tape.code.cursor,
            self.tape.data.cursor - self.tape.data.start,
        )
        return self.tape.to_list()


def emit(stream: Iterable[Statement], symbols: SymbolTable, capacity: int = DEFAULT_TAPE_SIZE) -> List[int]:
    """Build the tape image for an already resolved statement stream."""
    return TapeBuilder(symbols, capacity).build(stream)


__all__ = ["TapeBuilder", "emit"]
