"""Tape writers: decimal text or packed little-endian words."""

from __future__ import annotations

import struct
import sys
from pathlib import Path
from typing import Sequence

FORMAT_TEXT = "text"
FORMAT_BINARY = "binary"
FORMATS = (FORMAT_TEXT, FORMAT_BINARY)

STDOUT_PATH = "-"


def format_text(tape: Sequence[int]) -> str:
    return "".join(f"{value}\n" for value in tape)


def pack_binary(tape: Sequence[int]) -> bytes:
    return struct.pack(f"<{len(tape)}i", *tape)


def write_tape(tape: Sequence[int], path: str | Path, fmt: str = FORMAT_TEXT) -> None:
    """Write ``tape`` to ``path``; ``-`` means standard output."""
    if fmt not in FORMATS:
        raise ValueError(f"unknown output format {fmt!r}")
    to_stdout = str(path) == STDOUT_PATH
    if fmt == FORMAT_BINARY:
        data = pack_binary(tape)
        if to_stdout:
            sys.stdout.buffer.write(data)
            sys.stdout.flush()
        else:
            Path(path).write_bytes(data)
        return
    text = format_text(tape)
    if to_stdout:
        sys.stdout.write(text)
    else:
        Path(path).write_text(text, encoding="utf-8")


__all__ = ["FORMAT_TEXT", "FORMAT_BINARY", "FORMATS", "format_text", "pack_binary", "write_tape"]
