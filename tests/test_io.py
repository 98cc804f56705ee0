"""Tests for gridcalc CSV framing."""

from __future__ import annotations

from gridcalc._io import read_csv, write_csv


class TestReadCsv:
    def test_plain(self) -> None:
        assert read_csv("a,b\n1,2\n") == [["a", "b"], ["1", "2"]]

    def test_quoted_delimiter_and_quotes(self) -> None:
        assert read_csv('"x, y","say ""hi"""\n') == [["x, y", 'say "hi"']]

    def test_quoted_newline(self) -> None:
        assert read_csv('"line1\nline2",z\n') == [["line1\nline2", "z"]]

    def test_blank_lines_keep_row_positions(self) -> None:
        assert read_csv("a\n\nb\n") == [["a"], [], ["b"]]

    def test_trailing_blank_lines_dropped(self) -> None:
        assert read_csv("a\nb\n\n\n") == [["a"], ["b"]]

    def test_empty_fields_kept(self) -> None:
        assert read_csv("a,,c") == [["a", "", "c"]]

    def test_tab_delimiter(self) -> None:
        assert read_csv("a\tb", delimiter="\t") == [["a", "b"]]


class TestWriteCsv:
    def test_plain(self) -> None:
        assert write_csv([["a", "b"], ["1", "2"]]) == "a,b\n1,2\n"

    def test_quoting(self) -> None:
        assert write_csv([["x, y", 'say "hi"']]) == '"x, y","say ""hi"""\n'

    def test_empty(self) -> None:
        assert write_csv([]) == ""
