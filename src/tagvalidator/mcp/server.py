"""FastMCP server exposing TagValidator's validation engine as MCP tools.

Run via::

    tagvalidator-mcp                       # reads .env (default: stdio)
    MCP_TRANSPORT=http tagvalidator-mcp    # streamable HTTP on port 9000
    MCP_TRANSPORT=sse  tagvalidator-mcp    # legacy SSE on port 9000

Settings are loaded from environment variables and ``.env`` file.
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from tagvalidator import __version__
from tagvalidator.markup_reference import MARKUP_REFERENCE
from tagvalidator.models.errors import ValidationError
from tagvalidator.models.tokens import Language
from tagvalidator.service.engine import (
    DocumentTooLargeError,
    ValidationEngine,
    ValidationOutcome,
    ValidationTimeoutError,
)
from tagvalidator.service.report import auto_fix_missing_close, count_by_type
from tagvalidator.settings import Settings

# ---------------------------------------------------------------------------
# Server + shared state
# ---------------------------------------------------------------------------

logger = logging.getLogger("tagvalidator.mcp")

mcp = FastMCP("TagValidator")
_engine = ValidationEngine()


def _parse_language(language: str) -> Language:
    try:
        return Language(language.lower())
    except ValueError:
        names = ", ".join(lang.value for lang in Language)
        raise ToolError(f"Unsupported language '{language}'. Use one of: {names}") from None


def _run(content: str, language: str, max_errors: int | None = None) -> ValidationOutcome:
    lang = _parse_language(language)
    try:
        return _engine.run(content, lang, max_errors=max_errors)
    except ValidationTimeoutError as exc:
        msg = str(exc)
        if exc.partial_errors:
            msg += "\n" + _format_errors(exc.partial_errors)
        raise ToolError(msg) from exc
    except DocumentTooLargeError as exc:
        raise ToolError(str(exc)) from exc


def _format_errors(errors: list[ValidationError]) -> str:
    lines = []
    for e in errors:
        line = f"  line {e.line}, col {e.column}  [{e.type}] {e.message}"
        if e.suggestions:
            line += f"  Fix: {e.suggestions[0].description}"
        lines.append(line)
        if e.context:
            lines.append(f"      {e.context}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Resources: auto-injected context for LLMs
# ---------------------------------------------------------------------------


@mcp.resource("markup://reference")
def markup_reference() -> str:
    """Markup rules reference: void and raw-text elements, error types, suggestions."""
    return MARKUP_REFERENCE


@mcp.tool
def get_markup_reference() -> str:
    """Get the markup rules reference.

    Explains which elements never need closing tags, which regions are never
    scanned, and what each error type means.
    """
    return MARKUP_REFERENCE


# ---------------------------------------------------------------------------
# Validation tools
# ---------------------------------------------------------------------------


@mcp.tool
def validate_markup(content: str, language: str = "html", max_errors: int | None = None) -> str:
    """Check a markup document for unclosed, orphaned and mismatched tags.

    Returns one line per error with its 1-based line/column, a message,
    the offending source line and the most likely fix.

    Args:
        content: The complete document.
        language: One of html, xml, vue, jsx (xml is parsed strictly).
        max_errors: Stop reporting after this many errors (default 500).
    """
    logger.info("validate_markup called (length=%d, language=%s)", len(content), language)
    outcome = _run(content, language, max_errors)
    if outcome.valid:
        return f"No tag errors found ({outcome.total_lines} line(s) checked)."

    counts = count_by_type(outcome.errors)
    summary = ", ".join(f"{t}: {n}" for t, n in counts.items() if n)
    lines = [
        f"Found {len(outcome.errors)} tag error(s) ({summary}):",
        _format_errors(outcome.errors),
    ]
    if outcome.capped:
        lines.append(f"Stopped after {len(outcome.errors)} errors; fix these and re-run.")
    return "\n".join(lines)


@mcp.tool
def fix_missing_close(content: str, language: str = "html") -> str:
    """Append the closing tags a document is missing at its end.

    Only unclosed elements are fixed; orphaned or mismatched closing tags
    are reported but left in place.

    Args:
        content: The complete document.
        language: One of html, xml, vue, jsx.
    """
    outcome = _run(content, language)
    fixed = auto_fix_missing_close(content, outcome.errors)
    if fixed == content:
        return "Nothing to fix: no unclosed tags found.\n\n" + content

    remaining = _run(fixed, language).errors
    header = "Closing tags appended."
    if remaining:
        header += f"  {len(remaining)} error(s) remain:\n" + _format_errors(remaining)
    return f"{header}\n\n{fixed}"


@mcp.tool
def list_languages() -> str:
    """List supported languages and the tokenizer mode each one uses."""
    lines = ["Supported languages:", ""]
    for lang in Language:
        strict = " (strict)" if lang is Language.XML else ""
        lines.append(f"  {lang}: {lang.tokenizer_mode} tokenizer{strict}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


@mcp.prompt
def explain_errors() -> str:
    """How to read TagValidator errors and resolve them."""
    return """\
# Resolving TagValidator Errors

Work through errors top to bottom; one mismatch often explains the
MISSING_CLOSE errors that follow it.

- `MISMATCH`: the closing tag does not close the innermost open element.
  Fix: rename it to the expected tag, or insert the expected closing tag
  before it.
- `MISSING_OPEN`: a closing tag with nothing open to close.
  Fix: delete it, or add the opening tag it was meant for.
- `MISSING_CLOSE`: an element that is never closed.
  Fix: add the closing tag where the element should end.
  `fix_missing_close` appends them all at the end of the document.

Re-run `validate_markup` after each round of fixes.
"""


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Run the MCP server using settings from environment / .env file."""
    settings = Settings()

    logging.basicConfig(level=settings.log_level.upper())
    logger.info(
        "TagValidator MCP Server v%s starting (transport=%s)",
        __version__,
        settings.mcp_transport,
    )

    global _engine  # noqa: PLW0603
    _engine = ValidationEngine.from_settings(settings)

    if settings.mcp_transport == "stdio":
        mcp.run(transport="stdio")
    else:
        mcp.run(
            transport=settings.mcp_transport,
            host=settings.mcp_server_host,
            port=settings.mcp_server_port,
            log_level=settings.log_level.lower(),
        )


if __name__ == "__main__":
    main()
