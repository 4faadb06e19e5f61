"""Unit tests for report helpers: messages, counts, exports and auto-fix."""

from __future__ import annotations

import csv
import io
import json

from tagvalidator.models.errors import ErrorType, ValidationError
from tagvalidator.service.engine import validate_markup
from tagvalidator.service.report import (
    CSV_HEADER,
    auto_fix_missing_close,
    count_by_type,
    errors_to_csv,
    errors_to_json,
    format_error_message,
)
from tests.conftest import BROKEN_HTML


def _err(error_type: ErrorType, tag: str, line: int = 1, **kwargs: object) -> ValidationError:
    return ValidationError(
        id="err-1", type=error_type, line=line, column=1, tag=tag, message="m", **kwargs
    )


class TestFormatErrorMessage:
    def test_missing_close(self) -> None:
        msg = format_error_message(_err(ErrorType.MISSING_CLOSE, "div", 3))
        assert msg == "<div> at line 3 is never closed"

    def test_missing_open(self) -> None:
        msg = format_error_message(_err(ErrorType.MISSING_OPEN, "p", 2))
        assert msg == "</p> at line 2 has no matching opening tag"

    def test_mismatch(self) -> None:
        msg = format_error_message(_err(ErrorType.MISMATCH, "div", 4, expected="span"))
        assert msg == "Expected </span> but found </div> at line 4"


class TestCountByType:
    def test_all_types_present(self) -> None:
        assert count_by_type([]) == {
            ErrorType.MISMATCH: 0,
            ErrorType.MISSING_OPEN: 0,
            ErrorType.MISSING_CLOSE: 0,
        }

    def test_counts(self) -> None:
        counts = count_by_type(validate_markup(BROKEN_HTML))
        assert counts == {
            ErrorType.MISMATCH: 2,
            ErrorType.MISSING_OPEN: 1,
            ErrorType.MISSING_CLOSE: 3,
        }


class TestExport:
    def test_csv_header_and_quoting(self) -> None:
        error = ValidationError(
            id="err-1",
            type=ErrorType.MISSING_OPEN,
            line=2,
            column=5,
            tag="p",
            message='Found </p>, "orphan"',
            context="a, b",
        )
        rows = list(csv.reader(io.StringIO(errors_to_csv([error]))))
        assert tuple(rows[0]) == CSV_HEADER
        assert rows[1] == ["MISSING_OPEN", "p", "2", "5", 'Found </p>, "orphan"', "a, b"]

    def test_csv_with_source_column(self) -> None:
        text = errors_to_csv([_err(ErrorType.MISSING_CLOSE, "a")], source="x.html")
        rows = list(csv.reader(io.StringIO(text)))
        assert rows[0][0] == "File"
        assert rows[1][0] == "x.html"

    def test_csv_without_header(self) -> None:
        text = errors_to_csv([_err(ErrorType.MISSING_CLOSE, "a")], header=False)
        assert text.count("\n") == 1
        assert text.startswith("MISSING_CLOSE")

    def test_json_uses_wire_names(self) -> None:
        errors = validate_markup("<div><span>text</div>")
        data = json.loads(errors_to_json(errors))
        mismatch = next(e for e in data if e["type"] == "MISMATCH")
        assert mismatch["relatedLine"] == 1
        assert mismatch["relatedTag"] == "span"
        assert mismatch["suggestions"][0]["kind"] == "SWAP_TAGS"

    def test_json_empty(self) -> None:
        assert json.loads(errors_to_json([])) == []


class TestAutoFix:
    def test_appends_innermost_first(self) -> None:
        content = "<div>\n  <ul>\n    <li>item\n"
        fixed = auto_fix_missing_close(content, validate_markup(content))
        assert fixed == "<div>\n  <ul>\n    <li>item\n</li>\n</ul>\n</div>\n"
        assert validate_markup(fixed) == []

    def test_same_line_opens(self) -> None:
        content = "<a><b>x"
        fixed = auto_fix_missing_close(content, validate_markup(content))
        assert fixed == "<a><b>x\n</b>\n</a>\n"

    def test_nothing_to_fix(self) -> None:
        content = "<p>ok</p>"
        assert auto_fix_missing_close(content, validate_markup(content)) == content

    def test_ignores_other_error_types(self) -> None:
        content = "<p>x</p></q>"
        assert auto_fix_missing_close(content, validate_markup(content)) == content

    def test_broken_document(self) -> None:
        fixed = auto_fix_missing_close(BROKEN_HTML, validate_markup(BROKEN_HTML))
        assert fixed.endswith("</body>\n</span>\n</body>\n</html>\n")
