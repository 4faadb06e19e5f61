"""Duplicate removal and positional ordering of validation errors."""

from __future__ import annotations

from collections.abc import Iterable

from tagvalidator.models.errors import ValidationError


def deduplicate(errors: Iterable[ValidationError]) -> list[ValidationError]:
    """Keep the first error for each (type, tag, line); later ones are dropped."""
    seen: set[tuple[str, str, int]] = set()
    kept: list[ValidationError] = []
    for err in errors:
        key = err.dedup_key
        if key in seen:
            continue
        seen.add(key)
        kept.append(err)
    return kept


def sort_errors(errors: Iterable[ValidationError]) -> list[ValidationError]:
    return sorted(errors, key=lambda e: (e.line, e.column))


def finalize(errors: Iterable[ValidationError]) -> list[ValidationError]:
    return sort_errors(deduplicate(errors))
