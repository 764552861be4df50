import logging
import textwrap

import pytest

from tapeasm.desugar import desugar
from tapeasm.errors import LocalLabelOutsideBlock, NoParentLabel, UndefinedLabel
from tapeasm.parser import parse
from tapeasm.symbols import resolve_symbols, scan_blocks


def resolve_source(src: str):
    stmts = parse(textwrap.dedent(src).strip("\n") + "\n")
    return resolve_symbols(list(desugar(stmts)))


def test_offsets_blocks_and_code_size():
    table = resolve_source(
        """
        main:
            put &'A'
        .loop:
            jmp '.loop
        other:
            hlt
            5
            "abc"
        """
    )
    assert table.code_size == 9
    assert table.blocks["main"].start == 0
    assert table.blocks["main"].labels == {".loop": 2}
    assert table.blocks["other"].start == 4
    assert table.blocks["other"].labels == {}
    assert [block.name for block in table.scopes] == ["main", "other"]


def test_argument_labels_register_their_own_cell():
    table = resolve_source(
        """
        main:
            hlt
            cpy 1 <.x>
        """
    )
    assert table.blocks["main"].labels == {".x": 3}


def test_desugared_labels_land_in_operand_slots():
    table = resolve_source(
        """
        main:
            put **'.p
        .p:
            0
        """
    )
    # cpy '.p ':deref_1_1 | cpy <:deref_1_1> ':deref_1_0 | put <:deref_1_0>
    assert table.blocks["main"].labels == {":deref_1_1": 4, ":deref_1_0": 7, ".p": 8}
    assert table.code_size == 9


def test_local_label_without_parent_fails():
    with pytest.raises(NoParentLabel, match='local label ".x" has no parent label'):
        resolve_source(
            """
            .x:
                hlt
            """
        )


def test_argument_label_without_parent_fails():
    with pytest.raises(NoParentLabel):
        resolve_source("cpy 1 <.x>")


def test_redefined_global_label_last_definition_wins(caplog):
    with caplog.at_level(logging.WARNING, logger="tapeasm.symbols"):
        table = resolve_source(
            """
            a:
                hlt
            a:
                hlt
            """
        )
    assert table.blocks["a"].start == 1
    assert [block.start for block in table.scopes] == [0, 1]
    assert "redefined" in caplog.text


def test_scan_blocks_numbers_scopes_in_order():
    stmts = parse("hlt\nmain:\n.x:\nhlt\nnext:\nhlt\n")
    assert [scope for _, scope in scan_blocks(stmts)] == [None, 0, 0, 0, 1, 1]


def test_lookup_rules():
    table = resolve_source(
        """
        a:
        .x:
            hlt
        b:
            hlt
        """
    )
    a, b = table.scopes
    assert table.lookup(".x", a) == 0
    assert table.lookup("b", a) == 1
    with pytest.raises(UndefinedLabel, match='label ".x" used but not defined in block "b"'):
        table.lookup(".x", b)
    with pytest.raises(UndefinedLabel, match='label "c" used but not defined'):
        table.lookup("c", a)
    with pytest.raises(LocalLabelOutsideBlock):
        table.lookup(".x", None)
