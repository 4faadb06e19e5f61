"""Stack-based tag matching with bounded error recovery."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from tagvalidator.models.errors import ErrorType, Severity, ValidationError
from tagvalidator.models.tokens import VOID_ELEMENTS, StackEntry, Token, TokenKind
from tagvalidator.validator.dedup import finalize
from tagvalidator.validator.suggestions import (
    build_suggestions,
    extract_context,
    mismatch_message,
    missing_close_message,
    missing_open_message,
)

logger = logging.getLogger("tagvalidator.validator")

DEFAULT_MAX_ERRORS = 500
DEFAULT_PROGRESS_FRACTION = 0.05

ProgressCallback = Callable[[int, int], None]


class StackValidator:
    """Matches OPEN/CLOSE tokens against a stack of open elements.

    All state (stack, accumulated errors, error-id counter) belongs to the
    instance and is reset by each :meth:`validate` call.  Use one instance
    per concurrent validation.

    On a mismatched closing tag the validator reports the mismatch, then
    unwinds the stack down to the element the closing tag names, reporting
    every element it pops as unclosed.  The named element itself is popped
    silently.  Recovery therefore never costs more than the nesting depth
    at the point of the mismatch.
    """

    def __init__(
        self,
        text: str = "",
        *,
        max_errors: int = DEFAULT_MAX_ERRORS,
        progress_fraction: float = DEFAULT_PROGRESS_FRACTION,
    ) -> None:
        self._lines = text.split("\n")
        self.max_errors = max_errors
        self._progress_fraction = progress_fraction
        self.stack: list[StackEntry] = []
        self.errors: list[ValidationError] = []
        self._next_id = 0

    @property
    def capped(self) -> bool:
        """True once the error cap has been reached."""
        return len(self.errors) >= self.max_errors

    # -- public API ----------------------------------------------------------

    def validate(
        self, tokens: Sequence[Token], on_progress: ProgressCallback | None = None
    ) -> list[ValidationError]:
        """Validate *tokens* (in source order); return deduplicated, sorted errors.

        *on_progress* is called with ``(processed, total)`` at bounded
        intervals and once at the end.  Anything it raises propagates;
        :attr:`errors` then holds what was found so far.
        """
        self.stack = []
        self.errors = []
        self._next_id = 0

        total = len(tokens)
        interval = max(1, int(total * self._progress_fraction))

        for i, token in enumerate(tokens):
            if self.capped:
                logger.warning(
                    "Error cap of %d reached after %d of %d tokens", self.max_errors, i, total
                )
                break
            if on_progress is not None and i % interval == 0:
                on_progress(i, total)

            if token.kind is TokenKind.OPEN:
                self._handle_open(token)
            else:
                self._handle_close(token)

        self._unwind_at_end()

        if on_progress is not None:
            on_progress(total, total)

        result = finalize(self.errors)
        logger.debug(
            "Validated %d tokens: %d error(s), %d after dedup", total, len(self.errors), len(result)
        )
        return result

    # -- transitions ---------------------------------------------------------

    def _handle_open(self, token: Token) -> None:
        if token.name in VOID_ELEMENTS or token.is_self_closing:
            return
        self.stack.append(StackEntry(token.name, token.line, token.column))

    def _handle_close(self, token: Token) -> None:
        name = token.name
        if name in VOID_ELEMENTS:
            return

        if not self.stack:
            self._emit(
                ErrorType.MISSING_OPEN,
                line=token.line,
                column=token.column,
                tag=name,
                message=missing_open_message(name),
            )
            return

        top = self.stack[-1]
        if top.name == name:
            self.stack.pop()
            return

        self._emit(
            ErrorType.MISMATCH,
            line=token.line,
            column=token.column,
            tag=name,
            expected=top.name,
            message=mismatch_message(name, top.name, top.line),
            related_line=top.line,
            related_tag=top.name,
        )

        # Unwind to the element this closing tag names.
        while self.stack and self.stack[-1].name != name:
            unclosed = self.stack.pop()
            self._emit(
                ErrorType.MISSING_CLOSE,
                line=unclosed.line,
                column=unclosed.column,
                tag=unclosed.name,
                message=missing_close_message(unclosed.name, unclosed.line, at_eof=False),
                related_line=token.line,
            )
        if self.stack:
            # TODO: decide whether this element should be reported as closed
            # out of order instead of being absorbed silently.
            self.stack.pop()

    def _unwind_at_end(self) -> None:
        while self.stack and not self.capped:
            unclosed = self.stack.pop()
            self._emit(
                ErrorType.MISSING_CLOSE,
                line=unclosed.line,
                column=unclosed.column,
                tag=unclosed.name,
                message=missing_close_message(unclosed.name, unclosed.line, at_eof=True),
            )

    # -- internal ------------------------------------------------------------

    def _emit(
        self,
        error_type: ErrorType,
        *,
        line: int,
        column: int,
        tag: str,
        message: str,
        expected: str | None = None,
        related_line: int | None = None,
        related_tag: str | None = None,
    ) -> None:
        if self.capped:
            return
        self._next_id += 1
        self.errors.append(
            ValidationError(
                id=f"err-{self._next_id}",
                type=error_type,
                severity=Severity.ERROR,
                line=line,
                column=column,
                tag=tag,
                expected=expected,
                context=extract_context(self._lines, line, column),
                message=message,
                related_line=related_line,
                related_tag=related_tag,
                suggestions=build_suggestions(error_type, tag, expected),
            )
        )


def validate(
    tokens: Sequence[Token],
    text: str,
    *,
    max_errors: int = DEFAULT_MAX_ERRORS,
    on_progress: ProgressCallback | None = None,
) -> list[ValidationError]:
    """Validate a reconciled token stream against its source *text*."""
    return StackValidator(text, max_errors=max_errors).validate(tokens, on_progress)
