"""Rewrite dereferences in argument position into explicit copies.

``put *'ptr`` becomes::

    cpy 'ptr ':deref_0_0
    put <:deref_0_0>

and ``put **'ptr``::

    cpy 'ptr ':deref_0_1
    cpy <:deref_0_1> ':deref_0_0
    put <:deref_0_0>

Each ``<:name>`` argument is bound to its own cell, so the copy lands in the
operand slot of the instruction that reads it. Synthetic names carry the
output position where their copy chain starts plus the nesting depth, and
live under the ``:`` prefix reserved for compiler-made local labels.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List

from .nodes import ArgLabel, Deref, Instruction, LabelRef, Statement, SYNTHETIC_PREFIX
from .opcodes import Opcode

LOGGER = logging.getLogger("tapeasm.desugar")


def synthetic_name(pos: int, depth: int) -> str:
    return f"{SYNTHETIC_PREFIX}deref_{pos}_{depth}"


def _copy_chain(deref: Deref, target: str, pos: int, depth: int, out: List[Statement]) -> None:
    """Append the copies that leave the value of ``deref`` in ``target``'s cell."""
    operand = deref.operand
    dest = LabelRef(target, deref.span)
    if isinstance(operand, Deref):
        inner = synthetic_name(pos, depth + 1)
        _copy_chain(operand, inner, pos, depth + 1, out)
        source = ArgLabel(inner, operand.span)
        out.append(Instruction(Opcode.CPY, (source, dest), operand.span))
    else:
        out.append(Instruction(Opcode.CPY, (operand, dest), operand.span))


def desugar_instruction(inst: Instruction, pos: int) -> List[Statement]:
    """Expand ``inst`` as if its first emitted statement lands at ``pos``."""
    if not any(isinstance(arg, Deref) for arg in inst.args):
        return [inst]
    out: List[Statement] = []
    args = []
    for arg in inst.args:
        if isinstance(arg, Deref):
            name = synthetic_name(pos + len(out), 0)
            _copy_chain(arg, name, pos + len(out), 0, out)
            args.append(ArgLabel(name, arg.span))
        else:
            args.append(arg)
    out.append(Instruction(inst.opcode, tuple(args), inst.span))
    LOGGER.debug("expanded %s into %d statements at %d", inst, len(out), pos)
    return out


def desugar(statements: Iterable[Statement]) -> Iterator[Statement]:
    """Lazily yield ``statements`` with every argument dereference expanded."""
    emitted = 0
    for stmt in statements:
        if isinstance(stmt, Instruction):
            for item in desugar_instruction(stmt, emitted):
                emitted += 1
                yield item
        else:
            emitted += 1
            yield stmt


__all__ = ["desugar", "desugar_instruction", "synthetic_name"]
