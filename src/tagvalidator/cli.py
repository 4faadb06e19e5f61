"""Command-line interface for TagValidator."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from tagvalidator import __version__
from tagvalidator.models.errors import ValidationError
from tagvalidator.models.tokens import Language
from tagvalidator.service.engine import (
    DocumentTooLargeError,
    ValidationEngine,
    ValidationTimeoutError,
)
from tagvalidator.service.report import (
    auto_fix_missing_close,
    count_by_type,
    errors_to_csv,
)
from tagvalidator.settings import Settings

logger = logging.getLogger("tagvalidator.cli")

EXIT_OK = 0
EXIT_ERRORS_FOUND = 1
EXIT_FAILURE = 2


def _parse_args(argv: Sequence[str] | None, settings: Settings) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tagvalidator",
        description="Report unclosed, orphaned and mismatched tags in markup files.",
        epilog=(
            "Examples:\n"
            "  tagvalidator index.html\n"
            "  tagvalidator --language xml feed.xml sitemap.xml\n"
            "  cat page.vue | tagvalidator --language vue -\n"
            "  tagvalidator page.html --format csv > errors.csv\n"
            "  tagvalidator page.html --fix\n"
            "\n"
            "Exit status: 0 when clean, 1 when tag errors were found,\n"
            "2 when a file could not be read or validation timed out.\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "files",
        nargs="+",
        metavar="FILE",
        help="Markup file to check, or '-' to read from stdin",
    )
    parser.add_argument(
        "-l",
        "--language",
        choices=[lang.value for lang in Language],
        default=Language.HTML.value,
        help="Markup language (default: html; xml is parsed strictly)",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["text", "json", "csv"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--max-errors",
        type=int,
        default=settings.max_errors,
        help=f"Stop reporting after this many errors per file (default: {settings.max_errors})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.validation_timeout_seconds,
        help="Per-file time limit in seconds "
        f"(default: {settings.validation_timeout_seconds:g})",
    )
    parser.add_argument(
        "--fix",
        action="store_true",
        help="Append missing closing tags (files are rewritten; stdin goes to stdout)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log tokenizer diagnostics and timings to stderr",
    )
    parser.add_argument("--version", action="version", version=f"tagvalidator {__version__}")
    args = parser.parse_args(argv)
    if args.fix and "-" in args.files and args.format != "text":
        parser.error("--fix with stdin writes the document to stdout; use --format text")
    return args


def _read(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _format_text(path: str, errors: list[ValidationError]) -> str:
    lines = [f"{path}:{e.line}:{e.column}: {e.type} {e.message}" for e in errors]
    if errors:
        counts = count_by_type(errors)
        breakdown = ", ".join(f"{n} {t}" for t, n in counts.items() if n)
        lines.append(f"{path}: {len(errors)} error(s) ({breakdown})")
    else:
        lines.append(f"{path}: OK")
    return "\n".join(lines)


def _apply_fix(path: str, content: str, errors: list[ValidationError]) -> None:
    fixed = auto_fix_missing_close(content, errors)
    if path == "-":
        sys.stdout.write(fixed)
        return
    if fixed == content:
        return
    Path(path).write_text(fixed, encoding="utf-8")
    logger.info("Appended missing closing tags to %s", path)


def main(argv: Sequence[str] | None = None) -> int:
    """Validate each FILE and print its errors; return the exit status."""
    settings = Settings()
    args = _parse_args(argv, settings)

    level = logging.DEBUG if args.verbose else settings.log_level.upper()
    logging.basicConfig(level=level, stream=sys.stderr)

    engine = ValidationEngine(
        max_errors=args.max_errors,
        timeout_seconds=args.timeout,
        progress_fraction=settings.progress_fraction,
        max_document_chars=settings.max_document_chars,
    )
    language = Language(args.language)

    status = EXIT_OK
    json_report: list[dict[str, object]] = []
    csv_header = True

    for path in args.files:
        try:
            content = _read(path)
            errors = engine.run(content, language).errors
        except (OSError, UnicodeDecodeError) as exc:
            print(f"{path}: cannot read file: {exc}", file=sys.stderr)
            status = EXIT_FAILURE
            continue
        except ValidationTimeoutError as exc:
            print(f"{path}: {exc}", file=sys.stderr)
            status = EXIT_FAILURE
            continue
        except DocumentTooLargeError as exc:
            print(f"{path}: {exc}", file=sys.stderr)
            status = EXIT_FAILURE
            continue

        if errors and status == EXIT_OK:
            status = EXIT_ERRORS_FOUND

        if args.format == "json":
            json_report.append(
                {
                    "file": path,
                    "errors": [e.model_dump(mode="json", by_alias=True) for e in errors],
                }
            )
        elif args.format == "csv":
            sys.stdout.write(errors_to_csv(errors, source=path, header=csv_header))
            csv_header = False
        elif not (args.fix and path == "-"):
            print(_format_text(path, errors))

        if args.fix:
            _apply_fix(path, content, errors)

    if args.format == "json":
        print(json.dumps(json_report, indent=2, ensure_ascii=False))
    return status


if __name__ == "__main__":
    sys.exit(main())
