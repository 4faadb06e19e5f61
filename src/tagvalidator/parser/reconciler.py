"""Closing-tag reconciliation: recover closing tags the tokenizer swallowed."""

from __future__ import annotations

import logging
import re
from bisect import bisect_right
from collections.abc import Iterable

from tagvalidator.models.tokens import VOID_ELEMENTS, ExclusionRange, Token, TokenKind
from tagvalidator.parser.positions import LineIndex

logger = logging.getLogger("tagvalidator.parser")

# A literal closing tag; a pattern missing its ">" is deliberately not matched.
CLOSE_TAG_RE = re.compile(r"</([A-Za-z][A-Za-z0-9_:-]*)\s*>")


class ExclusionIndex:
    """Sorted, merged exclusion ranges with O(log n) containment checks."""

    __slots__ = ("_ends", "_starts")

    def __init__(self, ranges: Iterable[ExclusionRange]) -> None:
        starts: list[int] = []
        ends: list[int] = []
        for rng in sorted(ranges, key=lambda r: r.start):
            if ends and rng.start <= ends[-1] + 1:
                ends[-1] = max(ends[-1], rng.end)
            else:
                starts.append(rng.start)
                ends.append(rng.end)
        self._starts = starts
        self._ends = ends

    def __len__(self) -> int:
        return len(self._starts)

    def contains(self, offset: int) -> bool:
        i = bisect_right(self._starts, offset) - 1
        return i >= 0 and offset <= self._ends[i]


def reconcile(
    text: str,
    tokens: list[Token],
    emitted_offsets: set[int],
    exclusions: Iterable[ExclusionRange],
    line_index: LineIndex | None = None,
) -> list[Token]:
    """Return *tokens* plus a synthetic CLOSE for every swallowed closing tag.

    Every ``</name>`` in *text* is considered.  Void names, offsets the
    tokenizer already emitted and offsets inside an exclusion range (comment,
    CDATA, attribute value, raw-text body) are skipped.  The result is in
    source order.
    """
    if line_index is None:
        line_index = LineIndex(text)
    excluded = ExclusionIndex(exclusions)

    result = list(tokens)
    recovered: list[str] = []
    for match in CLOSE_TAG_RE.finditer(text):
        offset = match.start()
        name = match.group(1).lower()
        if name in VOID_ELEMENTS:
            continue
        if offset in emitted_offsets:
            continue
        if excluded.contains(offset):
            continue
        line, column = line_index.line_col(offset)
        result.append(
            Token(
                kind=TokenKind.CLOSE,
                name=name,
                line=line,
                column=column,
                offset=offset,
                synthetic=True,
            )
        )
        recovered.append(name)

    if recovered:
        logger.debug("Recovered %d swallowed closing tag(s): %s", len(recovered), recovered)

    result.sort(key=lambda t: t.position)
    return result
