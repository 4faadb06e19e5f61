"""Unit tests for the command-line interface."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path

import pytest

from tagvalidator.cli import EXIT_ERRORS_FOUND, EXIT_FAILURE, EXIT_OK, main
from tests.conftest import BROKEN_HTML, VALID_HTML


@pytest.fixture
def valid_file(tmp_path: Path) -> Path:
    path = tmp_path / "valid.html"
    path.write_text(VALID_HTML, encoding="utf-8")
    return path


@pytest.fixture
def broken_file(tmp_path: Path) -> Path:
    path = tmp_path / "broken.html"
    path.write_text(BROKEN_HTML, encoding="utf-8")
    return path


class TestTextOutput:
    def test_clean_file(self, valid_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([str(valid_file)]) == EXIT_OK
        assert capsys.readouterr().out.strip() == f"{valid_file}: OK"

    def test_errors_found(self, broken_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([str(broken_file)]) == EXIT_ERRORS_FOUND
        out = capsys.readouterr().out
        assert f"{broken_file}:4:31: MISMATCH Expected </span>" in out
        assert "6 error(s) (2 MISMATCH, 1 MISSING_OPEN, 3 MISSING_CLOSE)" in out

    def test_xml_language(self, tmp_path: Path) -> None:
        path = tmp_path / "feed.xml"
        path.write_text("<root><child>text</weirdclose></root>", encoding="utf-8")
        assert main(["--language", "xml", str(path)]) == EXIT_ERRORS_FOUND

    def test_stdin(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("<a></a>"))
        assert main(["-"]) == EXIT_OK
        assert capsys.readouterr().out.strip() == "-: OK"

    def test_missing_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([str(tmp_path / "nope.html")]) == EXIT_FAILURE
        assert "cannot read file" in capsys.readouterr().err

    def test_failure_wins_over_errors(self, broken_file: Path, tmp_path: Path) -> None:
        assert main([str(broken_file), str(tmp_path / "nope.html")]) == EXIT_FAILURE

    def test_timeout(self, valid_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--timeout", "0", str(valid_file)]) == EXIT_FAILURE
        assert "timeout" in capsys.readouterr().err


class TestStructuredOutput:
    def test_json(
        self, valid_file: Path, broken_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert main(["--format", "json", str(valid_file), str(broken_file)]) == EXIT_ERRORS_FOUND
        report = json.loads(capsys.readouterr().out)
        assert [r["file"] for r in report] == [str(valid_file), str(broken_file)]
        assert report[0]["errors"] == []
        assert len(report[1]["errors"]) == 6
        assert "relatedLine" in report[1]["errors"][0]

    def test_csv_single_header(
        self, broken_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        other = tmp_path / "other.html"
        other.write_text("</p>", encoding="utf-8")
        main(["--format", "csv", str(broken_file), str(other)])
        rows = list(csv.reader(io.StringIO(capsys.readouterr().out)))
        assert rows[0][:2] == ["File", "Type"]
        assert sum(1 for r in rows if r[0] == "File") == 1
        assert len(rows) == 1 + 6 + 1

    def test_max_errors(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = tmp_path / "orphans.html"
        path.write_text("</x>\n" * 10, encoding="utf-8")
        main(["--format", "json", "--max-errors", "4", str(path)])
        report = json.loads(capsys.readouterr().out)
        assert len(report[0]["errors"]) == 4


class TestFix:
    def test_fix_rewrites_file(self, tmp_path: Path) -> None:
        path = tmp_path / "open.html"
        path.write_text("<div><span>text", encoding="utf-8")
        assert main(["--fix", str(path)]) == EXIT_ERRORS_FOUND
        assert path.read_text(encoding="utf-8") == "<div><span>text\n</span>\n</div>\n"
        assert main([str(path)]) == EXIT_OK

    def test_fix_leaves_clean_file(self, valid_file: Path) -> None:
        main(["--fix", str(valid_file)])
        assert valid_file.read_text(encoding="utf-8") == VALID_HTML

    def test_fix_stdin_to_stdout(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("<ul><li>x"))
        main(["--fix", "-"])
        assert capsys.readouterr().out == "<ul><li>x\n</li>\n</ul>\n"

    def test_fix_stdin_clean_passthrough(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("<a></a>\n"))
        assert main(["--fix", "-"]) == EXIT_OK
        assert capsys.readouterr().out == "<a></a>\n"

    def test_fix_stdin_rejects_structured_output(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--fix", "--format", "json", "-"])
        assert exc_info.value.code == 2


class TestArguments:
    def test_requires_file(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2

    def test_rejects_unknown_language(self, valid_file: Path) -> None:
        with pytest.raises(SystemExit):
            main(["--language", "yaml", str(valid_file)])
