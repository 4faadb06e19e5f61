"""Tests for offset ↔ line/column mapping."""

from __future__ import annotations

from tagvalidator.parser.positions import LineIndex


class TestLineIndex:
    def test_single_line(self) -> None:
        idx = LineIndex("<div></div>")
        assert idx.line_count == 1
        assert idx.line_col(0) == (1, 1)
        assert idx.line_col(5) == (1, 6)

    def test_multi_line(self) -> None:
        text = "<div>\n  <span>\n</div>"
        idx = LineIndex(text)
        assert idx.line_count == 3
        assert idx.line_col(text.index("<span>")) == (2, 3)
        assert idx.line_col(text.index("</div>")) == (3, 1)

    def test_newline_belongs_to_its_line(self) -> None:
        idx = LineIndex("ab\ncd")
        assert idx.line_col(2) == (1, 3)
        assert idx.line_col(3) == (2, 1)

    def test_empty_text(self) -> None:
        idx = LineIndex("")
        assert idx.line_count == 1
        assert idx.line_col(0) == (1, 1)

    def test_offset_roundtrip_from_scanner_position(self) -> None:
        text = "a\nbb\nccc"
        idx = LineIndex(text)
        # Scanner positions use a 0-based column.
        assert idx.offset(3, 2) == text.index("ccc") + 2
        assert idx.line_col(idx.offset(2, 1)) == (2, 2)

    def test_trailing_newline_adds_line(self) -> None:
        assert LineIndex("<a>\n").line_count == 2
