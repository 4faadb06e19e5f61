"""Messages, source-context snippets and fix suggestions for tag errors."""

from __future__ import annotations

from tagvalidator.models.errors import ErrorType, FixSuggestion, SuggestionKind

CONTEXT_RADIUS = 40
ELLIPSIS = "…"


def build_suggestions(
    error_type: ErrorType, tag: str, expected: str | None = None
) -> list[FixSuggestion]:
    """Return fix candidates for an error, most confident first."""
    if error_type is ErrorType.MISSING_CLOSE:
        return [
            FixSuggestion(
                kind=SuggestionKind.ADD_CLOSING_TAG,
                description=f"Add </{tag}> closing tag",
                replacement=f"</{tag}>",
                precedence=1,
            )
        ]
    if error_type is ErrorType.MISSING_OPEN:
        return [
            FixSuggestion(
                kind=SuggestionKind.REMOVE_TAG,
                description=f"Remove orphaned </{tag}>",
                replacement="",
                precedence=1,
            )
        ]
    if error_type is ErrorType.MISMATCH and expected:
        return [
            FixSuggestion(
                kind=SuggestionKind.SWAP_TAGS,
                description=f"Change </{tag}> to </{expected}>",
                replacement=f"</{expected}>",
                precedence=1,
            ),
            FixSuggestion(
                kind=SuggestionKind.ADD_CLOSING_TAG,
                description=f"Insert </{expected}> before </{tag}>",
                replacement=f"</{expected}></{tag}>",
                precedence=2,
            ),
        ]
    return []


def extract_context(
    lines: list[str], line: int, column: int = 1, radius: int = CONTEXT_RADIUS
) -> str:
    """Return the trimmed source line, windowed around *column* when long."""
    if line < 1 or line > len(lines):
        return ""
    raw = lines[line - 1]
    stripped = raw.strip()
    width = radius * 2
    if len(stripped) <= width:
        return stripped

    leading = len(raw) - len(raw.lstrip())
    focus = min(max(column - 1 - leading, 0), len(stripped))
    start = max(0, focus - radius)
    end = min(len(stripped), start + width)
    start = max(0, end - width)
    snippet = stripped[start:end]
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(stripped):
        snippet += ELLIPSIS
    return snippet


def missing_open_message(tag: str) -> str:
    return f"Found </{tag}> but there is no opening <{tag}> tag"


def mismatch_message(tag: str, expected: str, opened_line: int) -> str:
    return f"Expected </{expected}> (opened at line {opened_line}) but found </{tag}>"


def missing_close_message(tag: str, opened_line: int, *, at_eof: bool) -> str:
    if at_eof:
        return f"<{tag}> opened at line {opened_line} was never closed before end of file"
    return f"<{tag}> opened at line {opened_line} was never closed"
