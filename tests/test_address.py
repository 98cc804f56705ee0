"""Tests for gridcalc address encoding and decoding."""

from __future__ import annotations

import pytest
from gridcalc._address import (
    Address,
    InvalidAddress,
    column_to_letters,
    decode,
    encode,
    letters_to_column,
    to_address,
)


class TestColumnLetters:
    def test_single_letters(self) -> None:
        assert column_to_letters(0) == "A"
        assert column_to_letters(25) == "Z"

    def test_two_letters(self) -> None:
        assert column_to_letters(26) == "AA"
        assert column_to_letters(27) == "AB"
        assert column_to_letters(51) == "AZ"
        assert column_to_letters(52) == "BA"
        assert column_to_letters(701) == "ZZ"
        assert column_to_letters(702) == "AAA"

    def test_letters_to_column_inverse(self) -> None:
        for idx in (0, 1, 25, 26, 51, 52, 701, 702, 18277):
            assert letters_to_column(column_to_letters(idx)) == idx

    def test_case_insensitive(self) -> None:
        assert letters_to_column("aa") == 26
        assert letters_to_column("Ab") == 27

    def test_negative_index_rejected(self) -> None:
        with pytest.raises(ValueError):
            column_to_letters(-1)

    def test_bad_letters_rejected(self) -> None:
        with pytest.raises(InvalidAddress):
            letters_to_column("")
        with pytest.raises(InvalidAddress):
            letters_to_column("A1")


class TestEncode:
    def test_relative(self) -> None:
        assert encode(0, False, 1, False) == "A1"

    def test_absolute_markers(self) -> None:
        assert encode(0, True, 1, True) == "$A$1"
        assert encode(27, True, 10, False) == "$AB10"
        assert encode(2, False, 5, True) == "C$5"

    def test_row_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            encode(0, False, 0, False)


class TestDecode:
    def test_simple(self) -> None:
        addr = decode("B7")
        assert addr.column == 1
        assert addr.row == 7
        assert not addr.column_absolute
        assert not addr.row_absolute

    def test_absolute_flags(self) -> None:
        addr = decode("$C$12")
        assert (addr.column, addr.row) == (2, 12)
        assert addr.column_absolute
        assert addr.row_absolute

    def test_mixed_flags(self) -> None:
        col_abs = decode("$A1")
        row_abs = decode("A$1")
        assert col_abs.column_absolute and not col_abs.row_absolute
        assert row_abs.row_absolute and not row_abs.column_absolute

    def test_lowercase_input(self) -> None:
        addr = decode("aa10")
        assert (addr.column, addr.row) == (26, 10)
        assert str(addr) == "AA10"

    def test_surrounding_whitespace(self) -> None:
        assert decode("  A1 ") == Address(0, 1)

    @pytest.mark.parametrize(
        "text",
        ["", "1A", "A", "12", "A0", "A1B", "A-1", "$$A1", "A$$1", "A1:B2", "A 1", "Ä1"],
    )
    def test_malformed(self, text: str) -> None:
        with pytest.raises(InvalidAddress):
            decode(text)

    def test_invalid_address_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="Invalid cell reference"):
            decode("nope")


class TestRoundTrip:
    @pytest.mark.parametrize("column", [0, 1, 25, 26, 300])
    @pytest.mark.parametrize("row", [1, 9, 100])
    def test_decode_encode(self, column: int, row: int) -> None:
        for col_abs in (False, True):
            for row_abs in (False, True):
                addr = decode(encode(column, col_abs, row, row_abs))
                assert (addr.column, addr.row) == (column, row)
                assert addr.column_absolute is col_abs
                assert addr.row_absolute is row_abs


class TestAddress:
    def test_absolute_markers_ignored_for_equality(self) -> None:
        assert decode("$A$1") == decode("A1")
        assert hash(decode("$A$1")) == hash(decode("A1"))
        assert len({decode("A1"), decode("$A1"), decode("A$1")}) == 1

    def test_str_and_key(self) -> None:
        addr = Address(1, 3, column_absolute=True)
        assert str(addr) == "$B3"
        assert addr.key == "B3"

    def test_offset_keeps_markers(self) -> None:
        addr = Address(0, 1, True, False).offset(2, 3)
        assert (addr.column, addr.row) == (2, 4)
        assert addr.column_absolute

    def test_offset_out_of_sheet(self) -> None:
        with pytest.raises(InvalidAddress):
            Address(0, 1).offset(-1, 0)

    def test_relative(self) -> None:
        rel = decode("$D$4").relative()
        assert str(rel) == "D4"

    def test_parse(self) -> None:
        assert Address.parse("c3") == Address(2, 3)

    def test_to_address(self) -> None:
        addr = Address(4, 4)
        assert to_address(addr) is addr
        assert to_address("E4") == addr
