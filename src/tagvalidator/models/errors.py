"""Structured validation errors with source positions and fix suggestions."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class ErrorType(StrEnum):
    MISMATCH = "MISMATCH"
    MISSING_OPEN = "MISSING_OPEN"
    MISSING_CLOSE = "MISSING_CLOSE"


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


class SuggestionKind(StrEnum):
    ADD_CLOSING_TAG = "ADD_CLOSING_TAG"
    REMOVE_TAG = "REMOVE_TAG"
    SWAP_TAGS = "SWAP_TAGS"


class FixSuggestion(BaseModel):
    """A candidate fix; ``precedence`` 1 is the most confident."""

    kind: SuggestionKind
    description: str
    replacement: str
    precedence: int = 1

    model_config = {"frozen": True}


class ValidationError(BaseModel):
    """A tag-balance error found by the stack validator.

    Created once by the validator and never mutated afterwards.
    """

    id: str
    type: ErrorType
    severity: Severity = Severity.ERROR
    line: int
    column: int
    tag: str
    expected: str | None = None
    context: str = ""
    message: str
    related_line: int | None = Field(None, alias="relatedLine")
    related_tag: str | None = Field(None, alias="relatedTag")
    suggestions: list[FixSuggestion] = []

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def dedup_key(self) -> tuple[ErrorType, str, int]:
        return (self.type, self.tag, self.line)
