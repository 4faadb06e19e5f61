"""Tokenizer adapter: turns streaming tag events into a positioned token stream.

The underlying tokenizer is the standard library ``HTMLParser``.  Its events
are treated as hints rather than ground truth: a permissive tokenizer can
silently drop closing tags, so alongside the tokens we record which closing
tags were emitted and which character ranges (comments, CDATA, attribute
values, script/style bodies) are not markup.  The reconciler uses both to
recover dropped closing tags from the raw text.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Protocol

from tagvalidator.models.tokens import (
    RAW_TEXT_ELEMENTS,
    ExclusionRange,
    Token,
    TokenizerMode,
    TokenKind,
)
from tagvalidator.parser.positions import LineIndex
from tagvalidator.parser.reconciler import reconcile

logger = logging.getLogger("tagvalidator.parser")

_COMMENT_END_RE = re.compile(r"--!?>")

Attrs = list[tuple[str, str | None]]


class ScannerSink(Protocol):
    """Receives events from :class:`MarkupScanner`. Offsets are 0-based."""

    def on_open(self, name: str, attrs: Attrs, offset: int, raw: str, self_closing: bool) -> None:
        ...

    def on_close(self, name: str, offset: int, implied: bool) -> None:
        ...

    def on_excluded(self, start: int, end: int) -> None:
        ...

    def on_error(self, message: str) -> None:
        ...


class MarkupScanner(HTMLParser):
    """``HTMLParser`` that reports tag events with absolute source offsets.

    In strict mode the scanner keeps its own element stack and does no
    recovery: a closing tag naming an element deeper in the stack implicitly
    closes everything above it, and a closing tag naming no open element is
    reported as an error and swallowed.  Script and style bodies are plain
    markup in strict mode.
    """

    def __init__(
        self, text: str, sink: ScannerSink, line_index: LineIndex, *, strict: bool = False
    ) -> None:
        super().__init__(convert_charrefs=True)
        self._text = text
        self._sink = sink
        self._index = line_index
        self._strict = strict
        self._open: list[str] = []
        if strict:
            self.CDATA_CONTENT_ELEMENTS = ()
            self.RCDATA_CONTENT_ELEMENTS = ()

    # -- helpers -------------------------------------------------------------

    def _offset(self) -> int:
        line, column0 = self.getpos()
        return self._index.offset(line, column0)

    def _construct_end(self, start: int) -> int:
        """Inclusive end offset of the comment/declaration starting at *start*."""
        text = self._text
        if text.startswith("<!--", start):
            match = _COMMENT_END_RE.search(text, start + 2)
            end = match.end() - 1 if match else -1
        elif text.startswith("<![CDATA[", start):
            end = text.find("]]>", start + 9)
            end = end + 2 if end >= 0 else -1
        else:
            end = text.find(">", start)
        return end if end >= 0 else len(text) - 1

    def _error(self, offset: int, message: str) -> None:
        line, column = self._index.line_col(offset)
        self._sink.on_error(f"{line}:{column}: {message}")

    def _exclude_construct(self) -> None:
        start = self._offset()
        self._sink.on_excluded(start, self._construct_end(start))

    # -- HTMLParser hooks ----------------------------------------------------

    def parse_html_declaration(self, i: int) -> int:
        # Marked sections are handled here so that CDATA is reported the same
        # way on every interpreter and unknown keywords never raise.
        rawdata = self.rawdata
        if rawdata.startswith("<![", i):
            terminator = "]]>" if rawdata.startswith("<![CDATA[", i) else ">"
            j = rawdata.find(terminator, i + 3)
            if j < 0:
                return -1
            self.unknown_decl(rawdata[i + 3 : j])
            return j + len(terminator)
        return super().parse_html_declaration(i)

    def handle_starttag(self, tag: str, attrs: Attrs) -> None:
        raw = self.get_starttag_text() or f"<{tag}>"
        if self._strict:
            self._open.append(tag)
        self._sink.on_open(tag, attrs, self._offset(), raw, raw.endswith("/>"))

    def handle_startendtag(self, tag: str, attrs: Attrs) -> None:
        offset = self._offset()
        raw = self.get_starttag_text() or f"<{tag}/>"
        self._sink.on_open(tag, attrs, offset, raw, True)
        self._sink.on_close(tag, offset, True)

    def handle_endtag(self, tag: str) -> None:
        offset = self._offset()
        if not self._strict:
            self._sink.on_close(tag, offset, False)
            return

        depth = len(self._open) - 1
        while depth >= 0 and self._open[depth] != tag:
            depth -= 1
        if depth < 0:
            self._error(offset, f"unexpected closing tag </{tag}>")
            return
        while len(self._open) > depth + 1:
            inner = self._open.pop()
            self._error(offset, f"<{inner}> implicitly closed by </{tag}>")
            self._sink.on_close(inner, offset, True)
        self._open.pop()
        self._sink.on_close(tag, offset, False)

    def handle_comment(self, data: str) -> None:
        self._exclude_construct()

    def unknown_decl(self, data: str) -> None:
        self._exclude_construct()

    def handle_decl(self, decl: str) -> None:
        self._exclude_construct()

    def handle_pi(self, data: str) -> None:
        self._exclude_construct()

    def close(self) -> None:
        super().close()
        for name in reversed(self._open):
            self._error(len(self._text), f"<{name}> still open at end of input")
        self._open.clear()


@dataclass
class ScanResult:
    """First-pass output: tokens plus the bookkeeping the reconciler needs."""

    tokens: list[Token]
    diagnostics: list[str]
    exclusions: list[ExclusionRange]
    emitted_close_offsets: set[int]
    line_index: LineIndex


class TokenizerAdapter:
    """Drives a :class:`MarkupScanner` over *text* and collects its events."""

    def __init__(self, text: str, mode: TokenizerMode | str = TokenizerMode.HTML) -> None:
        self.text = text
        self.mode = TokenizerMode(mode)
        self._index = LineIndex(text)
        self._tokens: list[Token] = []
        self._diagnostics: list[str] = []
        self._exclusions: list[ExclusionRange] = []
        self._emitted: set[int] = set()
        self._raw_text_start: int | None = None

    def run(self) -> ScanResult:
        scanner = MarkupScanner(
            self.text, self, self._index, strict=self.mode is TokenizerMode.XML
        )
        try:
            scanner.feed(self.text)
            scanner.close()
        except AssertionError as exc:
            # HTMLParser signals internal inconsistencies with AssertionError;
            # keep what was tokenized so far and let the reconciler cover the rest.
            self.on_error(f"tokenizer stopped early: {exc}")

        if self._raw_text_start is not None:
            self._exclude(self._raw_text_start, len(self.text) - 1)
            self._raw_text_start = None
        self._exclude_unterminated_comment()

        if self._diagnostics:
            logger.debug(
                "Tokenizer reported %d diagnostic(s) in %s mode",
                len(self._diagnostics),
                self.mode,
            )
            for message in self._diagnostics:
                logger.debug("Tokenizer: %s", message)
        return ScanResult(
            tokens=self._tokens,
            diagnostics=self._diagnostics,
            exclusions=self._exclusions,
            emitted_close_offsets=self._emitted,
            line_index=self._index,
        )

    # -- sink ----------------------------------------------------------------

    def on_open(self, name: str, attrs: Attrs, offset: int, raw: str, self_closing: bool) -> None:
        name = name.lower()
        line, column = self._index.line_col(offset)
        attributes: dict[str, str | None] = {}
        for attr_name, value in attrs:
            attributes.setdefault(attr_name, value)
        self._tokens.append(
            Token(
                kind=TokenKind.OPEN,
                name=name,
                line=line,
                column=column,
                offset=offset,
                attributes=attributes or None,
                is_self_closing=self_closing,
            )
        )
        self._exclude_attribute_values(offset, raw, attrs)

        if (
            self.mode is TokenizerMode.HTML
            and name in RAW_TEXT_ELEMENTS
            and not self_closing
        ):
            self._raw_text_start = offset + len(raw)

    def on_close(self, name: str, offset: int, implied: bool) -> None:
        if implied:
            return
        name = name.lower()
        self._emitted.add(offset)
        line, column = self._index.line_col(offset)
        self._tokens.append(
            Token(kind=TokenKind.CLOSE, name=name, line=line, column=column, offset=offset)
        )
        if self._raw_text_start is not None and name in RAW_TEXT_ELEMENTS:
            self._exclude(self._raw_text_start, offset - 1)
            self._raw_text_start = None

    def on_excluded(self, start: int, end: int) -> None:
        self._exclude(start, end)

    def on_error(self, message: str) -> None:
        self._diagnostics.append(message)

    # -- internal ------------------------------------------------------------

    def _exclude(self, start: int, end: int) -> None:
        if end >= start:
            self._exclusions.append(ExclusionRange(start, end))

    def _exclude_unterminated_comment(self) -> None:
        """Treat a ``<!--`` with no terminator as a comment running to end of input.

        Some ``HTMLParser`` releases hand such a comment back as text, so its
        contents would otherwise be tokenized and scanned for closing tags.
        """
        text = self.text
        to_end = len(text) - 1
        last_close = max(text.rfind("-->"), text.rfind("--!>"))
        start = text.find("<!--", max(last_close - 1, 0))
        while start >= 0:
            if last_close < start + 2 and not any(
                r.contains(start) and (r.start, r.end) != (start, to_end)
                for r in self._exclusions
            ):
                break
            start = text.find("<!--", start + 1)
        if start < 0:
            return

        self._tokens = [t for t in self._tokens if t.offset < start]
        self._emitted = {offset for offset in self._emitted if offset < start}
        self._exclude(start, to_end)
        line, column = self._index.line_col(start)
        self.on_error(f"{line}:{column}: unterminated comment runs to end of input")

    def _exclude_attribute_values(self, offset: int, raw: str, attrs: Attrs) -> None:
        """Register each attribute value's span inside the raw start tag."""
        lowered = raw.lower()
        cursor = 0
        for attr_name, value in attrs:
            name_at = lowered.find(attr_name, cursor)
            if name_at >= 0:
                cursor = name_at + len(attr_name)
            if not value:
                continue
            idx = raw.find(value, cursor)
            if idx < 0:
                # Value was entity-decoded; fall back to the whole tag.
                self._exclude(offset, offset + len(raw) - 1)
                return
            self._exclude(offset + idx, offset + idx + len(value) - 1)
            cursor = idx + len(value)


def tokenize(
    text: str, mode: TokenizerMode | str = TokenizerMode.HTML
) -> tuple[list[Token], list[str]]:
    """Tokenize *text* and reconcile swallowed closing tags.

    Returns the source-ordered token stream and the tokenizer's advisory
    diagnostics.
    """
    scan = TokenizerAdapter(text, TokenizerMode(mode)).run()
    tokens = reconcile(
        text,
        scan.tokens,
        scan.emitted_close_offsets,
        scan.exclusions,
        scan.line_index,
    )
    return tokens, scan.diagnostics
