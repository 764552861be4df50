"""Fixed-size tape arena with a code region and a trailing data region."""

from __future__ import annotations

import logging
from typing import List, Optional

from .errors import Span, TapeOverflow, UnresolvedCompileTimeDeref

LOGGER = logging.getLogger("tapeasm.tape")

DEFAULT_TAPE_SIZE = 256


class Region:
    """Bump allocator over ``[start, limit)`` of a shared cell list."""

    def __init__(self, name: str, cells: List[int], start: int, limit: int) -> None:
        self.name = name
        self.cells = cells
        self.start = start
        self.limit = max(start, limit)
        self.cursor = start

    def written(self, addr: int) -> bool:
        return self.start <= addr < self.cursor

    def append(self, value: int, span: Optional[Span] = None) -> int:
        addr = self.cursor
        if addr >= self.limit:
            raise TapeOverflow(
                f"tape size exceeded: {self.name} region full at cell {addr} (capacity {len(self.cells)})",
                span,
            )
        self.cells[addr] = value
        self.cursor += 1
        return addr

    def append_text(self, text: str, span: Optional[Span] = None) -> int:
        """Write one cell per code point; return the address of the first."""
        first = self.cursor
        for ch in text:
            self.append(ord(ch), span)
        return first


class TapeImage:
    """Tape of ``capacity`` cells; code grows from 0, data from ``code_size``."""

    def __init__(self, capacity: int = DEFAULT_TAPE_SIZE, code_size: int = 0) -> None:
        if capacity <= 0:
            raise ValueError("tape capacity must be positive")
        self.capacity = capacity
        self.cells: List[int] = [0] * capacity
        self.code = Region("code", self.cells, 0, min(code_size, capacity))
        self.data = Region("data", self.cells, code_size, capacity)
        LOGGER.debug("tape %d cells, code [0, %d), data [%d, %d)", capacity, self.code.limit, self.data.start, capacity)

    def read(self, addr: int, span: Optional[Span] = None) -> int:
        """Value of an already written cell."""
        if self.code.written(addr) or self.data.written(addr):
            return self.cells[addr]
        raise UnresolvedCompileTimeDeref(
            f"cell {addr} cannot be dereferenced, at least not at compile time",
            span,
        )

    def to_list(self) -> List[int]:
        return list(self.cells)


__all__ = ["DEFAULT_TAPE_SIZE", "Region", "TapeImage"]
