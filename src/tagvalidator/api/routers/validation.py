"""Synchronous validation endpoints: POST /validate and POST /fix."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from starlette.concurrency import run_in_threadpool

from tagvalidator.api.deps import get_engine
from tagvalidator.api.schemas import (
    ErrorCounts,
    FixRequest,
    FixResponse,
    TimeoutDetail,
    ValidateRequest,
    ValidateResponse,
)
from tagvalidator.models.errors import ValidationError
from tagvalidator.models.tokens import Language
from tagvalidator.service.engine import (
    DocumentTooLargeError,
    ValidationEngine,
    ValidationOutcome,
    ValidationTimeoutError,
)
from tagvalidator.service.report import auto_fix_missing_close, count_by_type

logger = logging.getLogger("tagvalidator.api")

router = APIRouter()


def error_counts(errors: list[ValidationError]) -> ErrorCounts:
    """Convert per-type counts into the response schema."""
    return ErrorCounts.model_validate({str(k): v for k, v in count_by_type(errors).items()})


async def _run(
    engine: ValidationEngine,
    content: str,
    language: Language,
    max_errors: int | None = None,
) -> ValidationOutcome:
    """Run the engine off the event loop, mapping engine failures to HTTP errors."""
    try:
        return await run_in_threadpool(engine.run, content, language, max_errors=max_errors)
    except DocumentTooLargeError as exc:
        raise HTTPException(status_code=413, detail=str(exc)) from None
    except ValidationTimeoutError as exc:
        detail = TimeoutDetail(message=str(exc), partial_errors=exc.partial_errors)
        raise HTTPException(
            status_code=408, detail=detail.model_dump(mode="json", by_alias=True)
        ) from None


@router.post("/validate", response_model=ValidateResponse)
async def validate_document(
    body: ValidateRequest,
    engine: ValidationEngine = Depends(get_engine),  # noqa: B008
) -> ValidateResponse:
    """Check a document for unbalanced tags."""
    outcome = await _run(engine, body.content, body.language, body.max_errors)
    logger.info(
        "Validated %d line(s) as %s: %d error(s)",
        outcome.total_lines,
        outcome.language,
        len(outcome.errors),
    )
    return ValidateResponse(
        valid=outcome.valid,
        language=outcome.language,
        errors=outcome.errors,
        counts=error_counts(outcome.errors),
        total_lines=outcome.total_lines,
        capped=outcome.capped,
        duration_ms=round(outcome.duration_ms, 3),
        diagnostics=outcome.diagnostics,
    )


@router.post("/fix", response_model=FixResponse)
async def fix_document(
    body: FixRequest,
    engine: ValidationEngine = Depends(get_engine),  # noqa: B008
) -> FixResponse:
    """Append the closing tags a document is missing and re-validate it."""
    outcome = await _run(engine, body.content, body.language)
    fixed = auto_fix_missing_close(body.content, outcome.errors)
    if fixed == body.content:
        return FixResponse(content=fixed, inserted=[], remaining_errors=outcome.errors)

    inserted = fixed[len(body.content.rstrip()) :].split()
    after = await _run(engine, fixed, body.language)
    return FixResponse(content=fixed, inserted=inserted, remaining_errors=after.errors)
