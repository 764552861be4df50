import struct
import textwrap

import pytest

from tapeasm.cli import main
from tapeasm.opcodes import Opcode

HELLO = textwrap.dedent(
    """
    main:
        put &'A'
        hlt
    """
).lstrip("\n")


def _write(tmp_path, text, name="prog.asm"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_compile_writes_one_value_per_line(tmp_path):
    src = _write(tmp_path, HELLO)
    out = tmp_path / "tape.txt"
    assert main(["compile", str(src), "-o", str(out), "-s", "16"]) == 0
    values = [int(line) for line in out.read_text(encoding="utf-8").splitlines()]
    assert len(values) == 16
    assert values[:4] == [Opcode.PUT, 3, Opcode.HLT, 65]


def test_compile_defaults_to_a_out(tmp_path, monkeypatch):
    src = _write(tmp_path, HELLO)
    monkeypatch.chdir(tmp_path)
    assert main(["compile", str(src)]) == 0
    assert len((tmp_path / "a.out").read_text(encoding="utf-8").splitlines()) == 256


def test_compile_to_stdout(tmp_path, capsys):
    src = _write(tmp_path, HELLO)
    assert main(["compile", str(src), "--output", "-", "--size", "8"]) == 0
    out = capsys.readouterr().out
    assert out == "8\n3\n0\n65\n0\n0\n0\n0\n"


def test_expand_prints_desugared_program(tmp_path, capsys):
    src = _write(tmp_path, "main:\n  put *'.p\n.p: 0\n")
    assert main(["compile", str(src), "-o", "-", "-s", "8", "-E"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("main:\n    cpy '.p ':deref_1_0\n    put <:deref_1_0>\n    .p:\n    0\n")


def test_binary_output(tmp_path):
    src = _write(tmp_path, "main:\n  ptn -1\n")
    out = tmp_path / "tape.bin"
    assert main(["compile", str(src), "-o", str(out), "-s", "4", "--format", "binary"]) == 0
    assert struct.unpack("<4i", out.read_bytes()) == (Opcode.PTN, -1, 0, 0)


def test_compile_error_reports_and_writes_nothing(tmp_path, capsys):
    src = _write(tmp_path, "main:\n  add 1 2 3\n  hlt\n")
    out = tmp_path / "tape.txt"
    assert main(["compile", str(src), "-o", str(out), "-s", "4"]) == 1
    err = capsys.readouterr().err
    assert f"{src}:3:3: error: tape size exceeded" in err
    assert not out.exists()


def test_missing_source_file(tmp_path, capsys):
    missing = tmp_path / "nope.asm"
    assert main(["compile", str(missing), "-o", str(tmp_path / "x")]) == 1
    assert "error:" in capsys.readouterr().err


def test_source_that_is_not_utf8(tmp_path, capsys):
    src = tmp_path / "latin1.asm"
    src.write_bytes(b"main:\n  put &'\xff'\n")
    out = tmp_path / "tape.txt"
    assert main(["compile", str(src), "-o", str(out)]) == 1
    err = capsys.readouterr().err
    assert err.startswith(f"{src}: error: not valid UTF-8 (byte 14)")
    assert not out.exists()


def test_size_must_be_positive(tmp_path):
    src = _write(tmp_path, HELLO)
    with pytest.raises(SystemExit) as info:
        main(["compile", str(src), "-s", "0"])
    assert info.value.code == 2
