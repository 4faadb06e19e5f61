"""Offset ↔ line/column mapping for source positions."""

from __future__ import annotations

from bisect import bisect_right


class LineIndex:
    """Line-start table built once per document.

    Lookups are a binary search over the table, so mapping every token of a
    large document stays O(n log n) overall.
    """

    __slots__ = ("_starts", "length")

    def __init__(self, text: str) -> None:
        starts = [0]
        find = text.find
        pos = find("\n")
        while pos != -1:
            starts.append(pos + 1)
            pos = find("\n", pos + 1)
        self._starts = starts
        self.length = len(text)

    @property
    def line_count(self) -> int:
        return len(self._starts)

    def line_col(self, offset: int) -> tuple[int, int]:
        """Return the 1-based ``(line, column)`` of *offset*."""
        line = bisect_right(self._starts, offset) - 1
        return line + 1, offset - self._starts[line] + 1

    def offset(self, line: int, column0: int) -> int:
        """Return the offset of a 1-based *line* and 0-based *column0*."""
        return self._starts[line - 1] + column0
