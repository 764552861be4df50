"""tapeasm command line entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List

from .assembler import CompileOptions, assemble
from .errors import AsmError, format_diagnostic
from .output import FORMAT_TEXT, FORMATS, write_tape
from .tape import DEFAULT_TAPE_SIZE

LOG = logging.getLogger("tapeasm.cli")

DEFAULT_OUTPUT = "a.out"


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _positive_int(text: str) -> int:
    try:
        value = int(text, 0)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {text!r}") from exc
    if value <= 0:
        raise argparse.ArgumentTypeError("tape size must be positive")
    return value


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tapeasm", description="Tape machine assembler")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("TAPEASM_LOG", "WARNING"),
        help="Logging level (default WARNING, or $TAPEASM_LOG)",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    c = sub.add_parser("compile", help="assemble a source file into a tape image")
    c.add_argument("source", help="assembly source file")
    c.add_argument(
        "-o",
        "--output",
        default=DEFAULT_OUTPUT,
        help=f"output path, '-' for stdout (default {DEFAULT_OUTPUT})",
    )
    c.add_argument(
        "-s",
        "--size",
        type=_positive_int,
        default=DEFAULT_TAPE_SIZE,
        help=f"tape capacity in cells (default {DEFAULT_TAPE_SIZE})",
    )
    c.add_argument("-E", "--expand", action="store_true", help="print the desugared program before emission")
    c.add_argument("--format", choices=FORMATS, default=FORMAT_TEXT, help="output encoding (default text)")
    return parser


def _compile(args: argparse.Namespace) -> int:
    source_path = Path(args.source)
    try:
        source = source_path.read_text(encoding="utf-8")
    except OSError as exc:
        print(f"{args.source}: error: {exc.strerror or exc}", file=sys.stderr)
        return 1
    except UnicodeDecodeError as exc:
        print(f"{args.source}: error: not valid UTF-8 (byte {exc.start})", file=sys.stderr)
        return 1
    options = CompileOptions(capacity=args.size, expand=args.expand)
    try:
        result = assemble(source, options)
    except AsmError as exc:
        LOG.debug("compilation failed", exc_info=True)
        print(format_diagnostic(exc, source, args.source), file=sys.stderr)
        return 1
    try:
        write_tape(result.tape, args.output, args.format)
    except OSError as exc:
        print(f"{args.output}: error: {exc.strerror or exc}", file=sys.stderr)
        return 1
    LOG.info("wrote %s (%d cells)", args.output, len(result.tape))
    return 0


def main(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    if args.cmd == "compile":
        return _compile(args)
    return 2


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
