"""Orchestrates the validation pipeline: Tokenize → Reconcile → Validate → Finalize."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from tagvalidator.models.errors import ValidationError
from tagvalidator.models.tokens import Language
from tagvalidator.parser.tokenizer import tokenize
from tagvalidator.settings import Settings
from tagvalidator.validator.dedup import finalize
from tagvalidator.validator.stack import (
    DEFAULT_MAX_ERRORS,
    DEFAULT_PROGRESS_FRACTION,
    StackValidator,
)

logger = logging.getLogger("tagvalidator.engine")

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_DOCUMENT_CHARS = 5_000_000


class DocumentTooLargeError(ValueError):
    """Raised when a document exceeds the configured size limit."""


class ValidationCancelled(Exception):  # noqa: N818
    """Raised when the host's cancel flag is observed during validation."""


class ValidationTimeoutError(TimeoutError):
    """Raised when validation exceeds its wall-clock deadline.

    ``partial_errors`` holds the (deduplicated, sorted) errors found before
    the deadline; hosts may show them as partial results.
    """

    def __init__(self, message: str, partial_errors: list[ValidationError] | None = None) -> None:
        super().__init__(message)
        self.partial_errors = partial_errors or []


class _DeadlineExceeded(Exception):  # noqa: N818
    pass


@dataclass
class ProgressUpdate:
    """Host-facing progress, expressed in source lines."""

    processed_lines: int
    total_lines: int
    progress_percent: int


@dataclass
class ValidationOutcome:
    """The result of validating one document."""

    errors: list[ValidationError]
    language: Language
    total_lines: int
    token_count: int
    duration_ms: float
    capped: bool = False
    diagnostics: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


ProgressListener = Callable[[ProgressUpdate], None]


class ValidationEngine:
    """Runs one document end-to-end per :meth:`run` call.

    The engine only holds configuration; every run builds its own validator
    state, so a single engine may serve several threads.
    """

    def __init__(
        self,
        *,
        max_errors: int = DEFAULT_MAX_ERRORS,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        progress_fraction: float = DEFAULT_PROGRESS_FRACTION,
        max_document_chars: int = DEFAULT_MAX_DOCUMENT_CHARS,
    ) -> None:
        self.max_errors = max_errors
        self.timeout_seconds = timeout_seconds
        self.progress_fraction = progress_fraction
        self.max_document_chars = max_document_chars

    @classmethod
    def from_settings(cls, settings: Settings) -> ValidationEngine:
        return cls(
            max_errors=settings.max_errors,
            timeout_seconds=settings.validation_timeout_seconds,
            progress_fraction=settings.progress_fraction,
            max_document_chars=settings.max_document_chars,
        )

    def run(
        self,
        content: str,
        language: Language | str = Language.HTML,
        *,
        on_progress: ProgressListener | None = None,
        cancel_event: threading.Event | None = None,
        max_errors: int | None = None,
    ) -> ValidationOutcome:
        """Validate *content* and return its errors.

        Raises :class:`ValidationCancelled` once *cancel_event* is seen set,
        :class:`ValidationTimeoutError` when the deadline passes and
        :class:`DocumentTooLargeError` for oversized input.  Malformed markup
        never raises.
        """
        language = Language(language)
        if len(content) > self.max_document_chars:
            raise DocumentTooLargeError(
                f"Document exceeds maximum size "
                f"({len(content):,} chars > {self.max_document_chars:,} limit)"
            )

        started = time.monotonic()
        deadline = started + self.timeout_seconds
        total_lines = content.count("\n") + 1

        def _report(processed_lines: int, percent: int) -> None:
            if on_progress is not None:
                on_progress(ProgressUpdate(processed_lines, total_lines, percent))

        def _checkpoint() -> None:
            if cancel_event is not None and cancel_event.is_set():
                raise ValidationCancelled("Validation cancelled")
            if time.monotonic() > deadline:
                raise _DeadlineExceeded

        def _on_tokens(processed: int, total: int) -> None:
            _checkpoint()
            fraction = processed / max(total, 1)
            _report(round(fraction * total_lines), round(fraction * 90) + 5)

        validator = StackValidator(
            content,
            max_errors=max_errors if max_errors is not None else self.max_errors,
            progress_fraction=self.progress_fraction,
        )
        if cancel_event is not None and cancel_event.is_set():
            raise ValidationCancelled("Validation cancelled")
        _report(0, 0)
        try:
            tokens, diagnostics = tokenize(content, language.tokenizer_mode)
            _checkpoint()
            errors = validator.validate(tokens, _on_tokens)
        except _DeadlineExceeded:
            partial = finalize(validator.errors)
            logger.warning(
                "Validation timed out after %.1fs with %d partial error(s)",
                self.timeout_seconds,
                len(partial),
            )
            raise ValidationTimeoutError(
                f"Validation timeout after {self.timeout_seconds:g} seconds. "
                "Partial results available.",
                partial,
            ) from None

        if cancel_event is not None and cancel_event.is_set():
            raise ValidationCancelled("Validation cancelled")
        _report(total_lines, 100)

        duration_ms = (time.monotonic() - started) * 1000
        logger.debug(
            "Validated %d line(s) as %s in %.1f ms: %d error(s)",
            total_lines,
            language,
            duration_ms,
            len(errors),
        )
        return ValidationOutcome(
            errors=errors,
            language=language,
            total_lines=total_lines,
            token_count=len(tokens),
            duration_ms=duration_ms,
            capped=validator.capped,
            diagnostics=diagnostics,
        )


def validate_markup(
    content: str, language: Language | str = Language.HTML, **engine_options: Any
) -> list[ValidationError]:
    """Validate *content* with a fresh engine and return its errors."""
    return ValidationEngine(**engine_options).run(content, language).errors
