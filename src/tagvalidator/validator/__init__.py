"""Stack-based tag validation, error enrichment and final ordering."""

from tagvalidator.validator.dedup import deduplicate, finalize, sort_errors
from tagvalidator.validator.stack import StackValidator, validate
from tagvalidator.validator.suggestions import build_suggestions, extract_context

__all__ = [
    "StackValidator",
    "build_suggestions",
    "deduplicate",
    "extract_context",
    "finalize",
    "sort_errors",
    "validate",
]
