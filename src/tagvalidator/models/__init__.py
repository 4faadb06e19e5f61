"""Pydantic domain models for TagValidator."""

from tagvalidator.models.errors import (
    ErrorType,
    FixSuggestion,
    Severity,
    SuggestionKind,
    ValidationError,
)
from tagvalidator.models.tokens import (
    RAW_TEXT_ELEMENTS,
    VOID_ELEMENTS,
    ExclusionRange,
    Language,
    StackEntry,
    Token,
    TokenizerMode,
    TokenKind,
)

__all__ = [
    "RAW_TEXT_ELEMENTS",
    "VOID_ELEMENTS",
    "ErrorType",
    "ExclusionRange",
    "FixSuggestion",
    "Language",
    "Severity",
    "StackEntry",
    "SuggestionKind",
    "Token",
    "TokenKind",
    "TokenizerMode",
    "ValidationError",
]
