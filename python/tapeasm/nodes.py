"""Statement, argument and literal node types.

Nodes are immutable and validate their shape on construction, so a tree that
exists is a tree the later passes can handle:

* ``Deref`` only wraps ``LabelRef``, ``Ref`` or another ``Deref``;
* ``String`` never appears as a bare instruction argument (only as the
  operand of ``Ref`` or as a standalone literal statement);
* an ``Instruction`` always carries exactly ``opcode.arity`` arguments.

Spans are excluded from equality so rewritten trees compare by content.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from .errors import AsmSyntaxError, Span
from .opcodes import Opcode

LOCAL_PREFIXES = (".", ":")
SYNTHETIC_PREFIX = ":"

_ESCAPES = {
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
    "\\": "\\\\",
}


def is_local_name(name: str) -> bool:
    return name.startswith(LOCAL_PREFIXES)


def _escape(text: str, quote: str) -> str:
    out = []
    for ch in text:
        if ch == quote:
            out.append("\\" + ch)
        else:
            out.append(_ESCAPES.get(ch, ch))
    return "".join(out)


@dataclass(frozen=True)
class Number:
    value: int
    span: Optional[Span] = field(default=None, compare=False)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Char:
    value: str
    span: Optional[Span] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if len(self.value) != 1:
            raise AsmSyntaxError("character literal must hold exactly one character", self.span)

    @property
    def code(self) -> int:
        return ord(self.value)

    def __str__(self) -> str:
        return f"'{_escape(self.value, chr(39))}'"


@dataclass(frozen=True)
class String:
    value: str
    span: Optional[Span] = field(default=None, compare=False)

    def __len__(self) -> int:
        return len(self.value)

    def __str__(self) -> str:
        return f'"{_escape(self.value, chr(34))}"'


@dataclass(frozen=True)
class LabelRef:
    name: str
    span: Optional[Span] = field(default=None, compare=False)

    @property
    def is_local(self) -> bool:
        return is_local_name(self.name)

    def __str__(self) -> str:
        return f"'{self.name}"


@dataclass(frozen=True)
class Ref:
    operand: "Literal"
    span: Optional[Span] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        # An empty string occupies no cell, so it has no address to take.
        if isinstance(self.operand, String) and not self.operand.value:
            raise AsmSyntaxError("cannot take the address of an empty string", self.span)

    def __str__(self) -> str:
        return f"&{self.operand}"


@dataclass(frozen=True)
class Deref:
    operand: "Literal"
    span: Optional[Span] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.operand, (LabelRef, Ref, Deref)):
            raise AsmSyntaxError(
                f"cannot dereference {type(self.operand).__name__.lower()} literal {self.operand}",
                self.span,
            )

    def __str__(self) -> str:
        return f"*{self.operand}"


Literal = Union[Number, Char, String, LabelRef, Ref, Deref]
LITERAL_TYPES = (Number, Char, String, LabelRef, Ref, Deref)


@dataclass(frozen=True)
class ArgLabel:
    """Bare ``<name>`` argument: a local label bound to the argument's own cell."""

    name: str
    span: Optional[Span] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not is_local_name(self.name):
            raise AsmSyntaxError("only local labels can be argument labels", self.span)

    def __str__(self) -> str:
        return f"<{self.name}>"


Argument = Union[ArgLabel, Literal]


@dataclass(frozen=True)
class Label:
    name: str
    span: Optional[Span] = field(default=None, compare=False)

    @property
    def is_local(self) -> bool:
        return is_local_name(self.name)

    def __str__(self) -> str:
        return f"{self.name}:"


@dataclass(frozen=True)
class Instruction:
    opcode: Opcode
    args: Tuple[Argument, ...] = ()
    span: Optional[Span] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        # Normalise lists handed in by callers; frozen, so bypass __setattr__.
        object.__setattr__(self, "args", tuple(self.args))
        if len(self.args) != self.opcode.arity:
            raise AsmSyntaxError(
                f"expected {self.opcode.arity} argument(s) but got {len(self.args)}",
                self.span,
            )
        for arg in self.args:
            if isinstance(arg, String):
                raise AsmSyntaxError("string literal is only valid behind '&'", arg.span or self.span)
            if not isinstance(arg, (ArgLabel,) + LITERAL_TYPES):
                raise AsmSyntaxError(f"invalid argument {arg!r}", self.span)

    @property
    def size(self) -> int:
        return 1 + len(self.args)

    def __str__(self) -> str:
        return " ".join([self.opcode.mnemonic] + [str(arg) for arg in self.args])


@dataclass(frozen=True)
class LiteralStatement:
    value: Literal
    span: Optional[Span] = field(default=None, compare=False)

    @property
    def size(self) -> int:
        if isinstance(self.value, String):
            return len(self.value)
        return 1

    def __str__(self) -> str:
        return str(self.value)


Statement = Union[Label, Instruction, LiteralStatement]

__all__ = [
    "Number",
    "Char",
    "String",
    "LabelRef",
    "Ref",
    "Deref",
    "Literal",
    "ArgLabel",
    "Argument",
    "Label",
    "Instruction",
    "LiteralStatement",
    "Statement",
    "is_local_name",
    "SYNTHETIC_PREFIX",
]
