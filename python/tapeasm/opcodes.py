"""Opcode definitions for the tape machine.

Keeping the canonical table in one module prevents drift between the front
end, the emitter and the listing renderer.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Dict, FrozenSet, Tuple


class Opcode(IntEnum):
    HLT = 0
    ADD = 1
    MUL = 2
    CLE = 3
    CEQ = 4
    JMP = 5
    BEQ = 6
    CPY = 7
    PUT = 8
    PTN = 9

    @property
    def arity(self) -> int:
        return ARITY[self]

    @property
    def mnemonic(self) -> str:
        return self.name.lower()

    def __str__(self) -> str:
        return self.mnemonic


# (mnemonic, opcode, operand count) in encoding order.
OPCODE_LIST: Tuple[Tuple[str, Opcode, int], ...] = (
    ("hlt", Opcode.HLT, 0),
    ("add", Opcode.ADD, 3),
    ("mul", Opcode.MUL, 3),
    ("cle", Opcode.CLE, 3),
    ("ceq", Opcode.CEQ, 3),
    ("jmp", Opcode.JMP, 1),
    ("beq", Opcode.BEQ, 2),
    ("cpy", Opcode.CPY, 2),
    ("put", Opcode.PUT, 1),
    ("ptn", Opcode.PTN, 1),
)

OPCODES: Dict[str, Opcode] = {mnemonic: op for mnemonic, op, _ in OPCODE_LIST}
ARITY: Dict[Opcode, int] = {op: nargs for _, op, nargs in OPCODE_LIST}

# Named by later revisions of the instruction set without a defined encoding.
RESERVED_MNEMONICS: FrozenSet[str] = frozenset({"psh", "pop", "cal", "ret"})

__all__ = [
    "Opcode",
    "OPCODE_LIST",
    "OPCODES",
    "ARITY",
    "RESERVED_MNEMONICS",
    "lookup_mnemonic",
]


def lookup_mnemonic(name: str) -> Opcode | None:
    """Return the opcode for ``name`` (case-insensitive) or None."""

    return OPCODES.get(name.lower())
