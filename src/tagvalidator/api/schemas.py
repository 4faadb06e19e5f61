"""API request/response Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from tagvalidator.models.errors import ValidationError
from tagvalidator.models.tokens import Language
from tagvalidator.service.jobs import JobStatus


class ValidateRequest(BaseModel):
    """Request body for POST /validate."""

    content: str = Field(description="Markup document to check")
    language: Language = Field(default=Language.HTML)
    max_errors: int | None = Field(default=None, ge=1, alias="maxErrors")

    model_config = {"populate_by_name": True}


class ErrorCounts(BaseModel):
    """Error count per type."""

    mismatch: int = Field(default=0, alias="MISMATCH")
    missing_open: int = Field(default=0, alias="MISSING_OPEN")
    missing_close: int = Field(default=0, alias="MISSING_CLOSE")

    model_config = {"populate_by_name": True}


class ValidateResponse(BaseModel):
    """Response body for POST /validate."""

    valid: bool
    language: Language
    errors: list[ValidationError] = []
    counts: ErrorCounts = Field(default_factory=ErrorCounts)
    total_lines: int = Field(alias="totalLines")
    capped: bool = False
    duration_ms: float = Field(alias="durationMs")
    diagnostics: list[str] = []

    model_config = {"populate_by_name": True}


class TimeoutDetail(BaseModel):
    """Body of a 408 response: the message plus what was found in time."""

    message: str
    partial_errors: list[ValidationError] = Field(default=[], alias="partialErrors")

    model_config = {"populate_by_name": True}


class FixRequest(BaseModel):
    """Request body for POST /fix."""

    content: str
    language: Language = Field(default=Language.HTML)


class FixResponse(BaseModel):
    """Response body for POST /fix."""

    content: str
    inserted: list[str] = Field(default=[], description="Closing tags appended, in order")
    remaining_errors: list[ValidationError] = Field(default=[], alias="remainingErrors")

    model_config = {"populate_by_name": True}


class LanguageInfo(BaseModel):
    """A supported language and the tokenizer mode it uses."""

    name: Language
    mode: str


class LanguageListResponse(BaseModel):
    """Response for GET /languages."""

    languages: list[LanguageInfo] = []


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = ""


class ReferenceResponse(BaseModel):
    """Response for GET /reference."""

    reference: str = Field(description="Markup rules reference text")


# ---------------------------------------------------------------------------
# Job schemas
# ---------------------------------------------------------------------------


class JobCreateRequest(BaseModel):
    """Request body for POST /jobs."""

    content: str
    language: Language = Field(default=Language.HTML)


class JobResponse(BaseModel):
    """Single job info."""

    job_id: str
    status: JobStatus
    language: Language
    created_at: datetime
    last_accessed_at: datetime
    total_lines: int
    progress_percent: int
    error_count: int
    message: str | None = None


class JobListResponse(BaseModel):
    """Response for GET /jobs."""

    jobs: list[JobResponse]


class JobErrorsResponse(BaseModel):
    """Response for GET /jobs/{job_id}/errors."""

    job_id: str
    status: JobStatus
    errors: list[ValidationError] = []
    counts: ErrorCounts = Field(default_factory=ErrorCounts)
