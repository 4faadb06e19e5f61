"""Background validation jobs: submit, poll, cancel and export."""

from __future__ import annotations

from dataclasses import asdict
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from tagvalidator.api.deps import get_job_manager, is_job_list_disabled
from tagvalidator.api.routers.validation import error_counts
from tagvalidator.api.schemas import (
    JobCreateRequest,
    JobErrorsResponse,
    JobListResponse,
    JobResponse,
)
from tagvalidator.service.jobs import JobInfo, JobManager, JobNotFoundError
from tagvalidator.service.report import errors_to_csv, errors_to_json

router = APIRouter()


# -- helpers -----------------------------------------------------------------


def _job_response(info: JobInfo) -> JobResponse:
    """Convert a JobInfo dataclass to a Pydantic response."""
    return JobResponse(**asdict(info))


def _not_found(job_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Job '{job_id}' not found")


# -- job CRUD ----------------------------------------------------------------


@router.post("", response_model=JobResponse, status_code=202)
async def submit_job(
    body: JobCreateRequest,
    mgr: JobManager = Depends(get_job_manager),  # noqa: B008
) -> JobResponse:
    """Queue a document for background validation."""
    return _job_response(mgr.submit(body.content, body.language))


@router.get("", response_model=JobListResponse)
async def list_jobs(
    mgr: JobManager = Depends(get_job_manager),  # noqa: B008
) -> JobListResponse:
    """List all jobs that have not expired."""
    if is_job_list_disabled():
        raise HTTPException(status_code=403, detail="Job listing is disabled")
    return JobListResponse(jobs=[_job_response(j) for j in mgr.list_jobs()])


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: str,
    mgr: JobManager = Depends(get_job_manager),  # noqa: B008
) -> JobResponse:
    """Get status and progress of a job."""
    try:
        info = mgr.get_job(job_id)
    except JobNotFoundError:
        raise _not_found(job_id) from None
    return _job_response(info)


@router.get("/{job_id}/errors", response_model=JobErrorsResponse)
async def get_job_errors(
    job_id: str,
    mgr: JobManager = Depends(get_job_manager),  # noqa: B008
) -> JobErrorsResponse:
    """Errors found by a job (partial errors if it timed out)."""
    try:
        info = mgr.get_job(job_id)
        errors = mgr.get_errors(job_id)
    except JobNotFoundError:
        raise _not_found(job_id) from None
    return JobErrorsResponse(
        job_id=info.job_id, status=info.status, errors=errors, counts=error_counts(errors)
    )


@router.delete("/{job_id}", status_code=204)
async def cancel_job(
    job_id: str,
    mgr: JobManager = Depends(get_job_manager),  # noqa: B008
) -> None:
    """Cancel a job and release it."""
    try:
        mgr.remove_job(job_id)
    except JobNotFoundError:
        raise _not_found(job_id) from None


@router.get("/{job_id}/export")
async def export_job(
    job_id: str,
    fmt: Literal["csv", "json"] = Query("json", alias="format"),
    mgr: JobManager = Depends(get_job_manager),  # noqa: B008
) -> Response:
    """Download a job's errors as CSV or JSON."""
    try:
        errors = mgr.get_errors(job_id)
    except JobNotFoundError:
        raise _not_found(job_id) from None
    if fmt == "csv":
        return Response(
            content=errors_to_csv(errors),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{job_id}-errors.csv"'},
        )
    return Response(
        content=errors_to_json(errors),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{job_id}-errors.json"'},
    )
