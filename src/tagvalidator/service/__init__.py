"""Service layer: validation engine, background worker, jobs and reports."""

from tagvalidator.service.engine import (
    DocumentTooLargeError,
    ProgressUpdate,
    ValidationCancelled,
    ValidationEngine,
    ValidationOutcome,
    ValidationTimeoutError,
    validate_markup,
)
from tagvalidator.service.jobs import JobInfo, JobManager, JobNotFoundError, JobStatus
from tagvalidator.service.worker import ValidationWorker, run_request

__all__ = [
    "DocumentTooLargeError",
    "JobInfo",
    "JobManager",
    "JobNotFoundError",
    "JobStatus",
    "ProgressUpdate",
    "ValidationCancelled",
    "ValidationEngine",
    "ValidationOutcome",
    "ValidationTimeoutError",
    "ValidationWorker",
    "run_request",
    "validate_markup",
]
