"""Source text to statement list.

Grammar, one line at a time::

    line      := decl* (instruction | literal)? comment?
    decl      := ident ':'               ; ident may start with '.'
    instruction := mnemonic argument*
    argument  := '<' local-ident '>' | literal
    literal   := number | char | string | "'" ident | '&' literal | '*' literal
    comment   := ';' ...

Names starting with ``:`` belong to the desugarer and are refused here.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, List, NamedTuple, Tuple

from .errors import AsmSyntaxError, Span
from .nodes import (
    SYNTHETIC_PREFIX,
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
from .opcodes import RESERVED_MNEMONICS, lookup_mnemonic

LOGGER = logging.getLogger("tapeasm.parser")

I32_MIN = -(1 << 31)
I32_MAX = (1 << 31) - 1

_NAME = r"[A-Za-z_][A-Za-z0-9_]*"

# Order matters: chars before label values, declarations before mnemonics.
TOKEN_SPEC = [
    ("WS", r"[ \t\r\f\v]+"),
    ("COMMENT", r";[^\n]*"),
    ("STRING", r'"(?:[^"\\\n]|\\.)*"'),
    ("BADSTRING", r'"[^\n]*'),
    ("CHAR", r"'(?:[^'\\\n]|\\x[0-9A-Fa-f]{2}|\\.)'"),
    ("LABELREF", rf"'[.:]?{_NAME}"),
    ("BADCHAR", r"'"),
    ("ARGLABEL", rf"<[.:]?{_NAME}>"),
    ("DECL", rf"[.:]?{_NAME}:"),
    ("NUMBER", r"-?(?:0[xX][0-9A-Fa-f]+|0[bB][01]+|[0-9]+)(?![A-Za-z0-9_])"),
    ("IDENT", _NAME),
    ("PREFIX", r"[&*]"),
]

MASTER = re.compile("|".join(f"(?P<{kind}>{pattern})" for kind, pattern in TOKEN_SPEC))

_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "0": "\0",
    "\\": "\\",
    "'": "'",
    '"': '"',
}


class Token(NamedTuple):
    kind: str
    text: str
    span: Span


def _unescape(body: str, span: Span) -> str:
    out: List[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        i += 1
        if i >= len(body):
            raise AsmSyntaxError("trailing escape", span)
        esc = body[i]
        if esc == "x":
            digits = body[i + 1:i + 3]
            if len(digits) != 2 or not all(c in "0123456789abcdefABCDEF" for c in digits):
                raise AsmSyntaxError("\\x expects two hex digits", span)
            out.append(chr(int(digits, 16)))
            i += 3
            continue
        out.append(_SIMPLE_ESCAPES.get(esc, esc))
        i += 1
    return "".join(out)


def parse_int(text: str, span: Span) -> int:
    sign = -1 if text.startswith("-") else 1
    digits = text.lstrip("-").lower()
    if digits.startswith("0x"):
        value = int(digits, 16)
    elif digits.startswith("0b"):
        value = int(digits, 2)
    else:
        value = int(digits, 10)
    value *= sign
    if not (I32_MIN <= value <= I32_MAX):
        raise AsmSyntaxError(f"number {text} does not fit in 32 bits", span)
    return value


def tokenize_line(text: str, line_no: int, offset: int) -> List[Token]:
    """Split one source line into tokens, dropping whitespace and comments."""
    tokens: List[Token] = []
    pos = 0
    while pos < len(text):
        match = MASTER.match(text, pos)
        if not match:
            span = Span(offset + pos, offset + pos + 1, line_no, pos + 1)
            raise AsmSyntaxError(f"unexpected character {text[pos]!r}", span)
        kind = match.lastgroup
        span = Span(offset + pos, offset + match.end(), line_no, pos + 1)
        if kind == "BADSTRING":
            raise AsmSyntaxError("unterminated string literal", span)
        if kind == "BADCHAR":
            raise AsmSyntaxError("invalid character literal", span)
        if kind not in ("WS", "COMMENT"):
            tokens.append(Token(kind, match.group(0), span))
        pos = match.end()
    return tokens


def _join(first: Span, last: Span) -> Span:
    return Span(first.start, last.end, first.line, first.column)


def _source_label(name: str, span: Span) -> str:
    if name.startswith(SYNTHETIC_PREFIX):
        raise AsmSyntaxError(
            f"label {name!r} uses the '{SYNTHETIC_PREFIX}' prefix reserved for compiler-generated labels",
            span,
        )
    return name


class _LineParser:
    def __init__(self, tokens: List[Token]) -> None:
        self.tokens = tokens
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def take(self) -> Token:
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def literal(self, after: Span) -> Literal:
        if self.at_end():
            raise AsmSyntaxError("expected a literal", after)
        tok = self.take()
        if tok.kind == "PREFIX":
            operand = self.literal(tok.span)
            span = _join(tok.span, operand.span)
            if tok.text == "&":
                return Ref(operand, span)
            return Deref(operand, span)
        if tok.kind == "NUMBER":
            return Number(parse_int(tok.text, tok.span), tok.span)
        if tok.kind == "CHAR":
            return Char(_unescape(tok.text[1:-1], tok.span), tok.span)
        if tok.kind == "STRING":
            return String(_unescape(tok.text[1:-1], tok.span), tok.span)
        if tok.kind == "LABELREF":
            return LabelRef(_source_label(tok.text[1:], tok.span), tok.span)
        if tok.kind == "IDENT":
            raise AsmSyntaxError(
                f"expected a literal, got {tok.text!r} (label values are written '{tok.text})",
                tok.span,
            )
        raise AsmSyntaxError(f"expected a literal, got {tok.text!r}", tok.span)

    def argument(self, after: Span) -> Argument:
        if not self.at_end() and self.peek().kind == "ARGLABEL":
            tok = self.take()
            return ArgLabel(_source_label(tok.text[1:-1], tok.span), tok.span)
        return self.literal(after)

    def instruction(self) -> Instruction:
        tok = self.take()
        name = tok.text.lower()
        if name in RESERVED_MNEMONICS:
            raise AsmSyntaxError(f"reserved instruction {tok.text!r} has no encoding", tok.span)
        opcode = lookup_mnemonic(name)
        if opcode is None:
            raise AsmSyntaxError(f"not a valid instruction: {tok.text!r}", tok.span)
        args: List[Argument] = []
        last = tok.span
        while not self.at_end():
            if self.peek().kind == "DECL":
                raise AsmSyntaxError("label declarations must precede the instruction", self.peek().span)
            arg = self.argument(last)
            args.append(arg)
            last = arg.span
        return Instruction(opcode, tuple(args), tok.span)

    def statements(self) -> Iterator[Statement]:
        while not self.at_end() and self.peek().kind == "DECL":
            tok = self.take()
            yield Label(_source_label(tok.text[:-1], tok.span), tok.span)
        if self.at_end():
            return
        if self.peek().kind == "IDENT":
            yield self.instruction()
            return
        start = self.peek().span
        value = self.literal(start)
        if not self.at_end():
            raise AsmSyntaxError("unexpected token after literal", self.peek().span)
        yield LiteralStatement(value, value.span)


def iter_lines(source: str) -> Iterator[Tuple[int, int, str]]:
    """Yield ``(line_no, offset, text)`` for every line of ``source``."""
    offset = 0
    for line_no, raw in enumerate(source.splitlines(True), start=1):
        yield line_no, offset, raw.rstrip("\r\n")
        offset += len(raw)


def parse(source: str) -> List[Statement]:
    """Parse assembly source into an ordered statement list."""
    statements: List[Statement] = []
    for line_no, offset, text in iter_lines(source):
        tokens = tokenize_line(text, line_no, offset)
        if tokens:
            statements.extend(_LineParser(tokens).statements())
    LOGGER.debug("parsed %d statements", len(statements))
    return statements


__all__ = ["parse", "parse_int", "tokenize_line", "Token"]
