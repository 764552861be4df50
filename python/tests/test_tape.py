import pytest

from tapeasm.errors import TapeOverflow, UnresolvedCompileTimeDeref
from tapeasm.tape import TapeImage


def test_regions_share_one_zero_filled_arena():
    tape = TapeImage(8, code_size=3)
    assert tape.code.append(11) == 0
    assert tape.data.append(22) == 3
    assert tape.data.append_text("hi") == 4
    assert tape.to_list() == [11, 0, 0, 22, ord("h"), ord("i"), 0, 0]


def test_code_region_cannot_cross_into_data():
    tape = TapeImage(4, code_size=2)
    tape.code.append(1)
    tape.code.append(2)
    with pytest.raises(TapeOverflow, match="code region full at cell 2"):
        tape.code.append(3)


def test_data_region_stops_at_capacity():
    tape = TapeImage(4, code_size=3)
    tape.data.append(1)
    with pytest.raises(TapeOverflow, match="data region full at cell 4"):
        tape.data.append(2)


def test_code_larger_than_capacity_overflows_at_capacity():
    tape = TapeImage(2, code_size=5)
    tape.code.append(1)
    tape.code.append(2)
    with pytest.raises(TapeOverflow):
        tape.code.append(3)
    with pytest.raises(TapeOverflow):
        tape.data.append(4)


def test_only_written_cells_are_readable():
    tape = TapeImage(8, code_size=4)
    tape.code.append(5)
    tape.data.append(6)
    assert tape.read(0) == 5
    assert tape.read(4) == 6
    for addr in (1, 3, 5, 8, -1):
        with pytest.raises(UnresolvedCompileTimeDeref):
            tape.read(addr)


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        TapeImage(0)
