"""Report helpers: short messages, per-type counts, CSV/JSON export and the
closing-tag auto-fix."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable

from tagvalidator.models.errors import ErrorType, ValidationError

CSV_HEADER = ("Type", "Tag", "Line", "Column", "Message", "Context")


def format_error_message(error: ValidationError) -> str:
    """One-line summary of *error* suitable for lists and terminals."""
    match error.type:
        case ErrorType.MISSING_CLOSE:
            return f"<{error.tag}> at line {error.line} is never closed"
        case ErrorType.MISSING_OPEN:
            return f"</{error.tag}> at line {error.line} has no matching opening tag"
        case ErrorType.MISMATCH:
            return f"Expected </{error.expected}> but found </{error.tag}> at line {error.line}"
    return error.message


def count_by_type(errors: Iterable[ValidationError]) -> dict[ErrorType, int]:
    """Error count per type; every type is present, zero when absent."""
    counts = dict.fromkeys(ErrorType, 0)
    for error in errors:
        counts[error.type] += 1
    return counts


def errors_to_csv(
    errors: Iterable[ValidationError], *, source: str | None = None, header: bool = True
) -> str:
    """Render *errors* as CSV; a leading File column is added when *source* is set."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    prefix: list[object] = [] if source is None else [source]
    if header:
        writer.writerow((["File"] if source is not None else []) + list(CSV_HEADER))
    for e in errors:
        writer.writerow(prefix + [e.type.value, e.tag, e.line, e.column, e.message, e.context])
    return buf.getvalue()


def errors_to_json(errors: Iterable[ValidationError]) -> str:
    return json.dumps(
        [e.model_dump(mode="json", by_alias=True) for e in errors],
        indent=2,
        ensure_ascii=False,
    )


def auto_fix_missing_close(content: str, errors: Iterable[ValidationError]) -> str:
    """Append a closing tag for every MISSING_CLOSE error at end of document.

    Tags are closed innermost first (latest opening position first), one per
    line.  Content is returned unchanged when nothing is missing.
    """
    missing = sorted(
        (e for e in errors if e.type is ErrorType.MISSING_CLOSE),
        key=lambda e: (e.line, e.column),
        reverse=True,
    )
    if not missing:
        return content
    closing = "\n".join(f"</{e.tag}>" for e in missing)
    return f"{content.rstrip()}\n{closing}\n"
