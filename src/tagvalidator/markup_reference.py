"""Markup rules reference, served via the REST API and the MCP resource."""

from __future__ import annotations

from tagvalidator.models.tokens import RAW_TEXT_ELEMENTS, VOID_ELEMENTS

_VOID = ", ".join(sorted(VOID_ELEMENTS))
_RAW = ", ".join(sorted(RAW_TEXT_ELEMENTS))

MARKUP_REFERENCE = f"""\
# TagValidator Reference

TagValidator checks that every opening tag in a markup document is closed by a
matching closing tag, in proper nesting order.

## Languages

| language | tokenizer | notes                                        |
|----------|-----------|----------------------------------------------|
| html     | html      | permissive; raw-text bodies are not scanned  |
| vue      | html      | single-file component templates              |
| jsx      | html      | markup portions only                         |
| xml      | xml       | strict; no raw-text elements                 |

## Void elements

Never need a closing tag; a stray closing tag for one is ignored:

{_VOID}

## Raw-text elements (html mode)

Their bodies are opaque, so `</div>` inside `<script>` is not a tag:

{_RAW}

## Never scanned for closing tags

- comments `<!-- ... -->`
- CDATA sections `<![CDATA[ ... ]]>`
- declarations `<!DOCTYPE ...>` and processing instructions `<? ... ?>`
- attribute values, e.g. `<a title="</b>">`

Self-closing syntax `<x/>` closes the element on the spot.

## Error types

| type          | meaning                                                     |
|---------------|-------------------------------------------------------------|
| MISSING_OPEN  | closing tag with no open element to close                   |
| MISMATCH      | closing tag does not match the innermost open element       |
| MISSING_CLOSE | element opened but never closed (recovery or end of file)   |

After a MISMATCH the validator unwinds to the element the closing tag names,
reporting every element it passes as MISSING_CLOSE.  Errors are reported
once per (type, tag, line) and ordered by line, then column.  At most
`max_errors` (default 500) errors are reported per document.

## Suggestions

- MISSING_CLOSE: add `</tag>` (precedence 1)
- MISSING_OPEN: remove the orphaned `</tag>` (precedence 1)
- MISMATCH: change the closing tag to `</expected>` (1), or insert
  `</expected>` before it (2)
"""
