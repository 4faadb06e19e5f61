"""Job management: TTL-scoped background validations for multi-client use."""

from __future__ import annotations

import secrets
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

from tagvalidator.models.errors import ValidationError
from tagvalidator.models.messages import (
    CompleteMessage,
    ErrorMessage,
    ProgressMessage,
    ValidateRequest,
)
from tagvalidator.models.tokens import Language
from tagvalidator.service.engine import ValidationEngine
from tagvalidator.service.worker import ResponseMessage, run_request


class JobStatus(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETE = "complete"
    ERROR = "error"
    CANCELLED = "cancelled"


_FINISHED = frozenset({JobStatus.COMPLETE, JobStatus.ERROR, JobStatus.CANCELLED})


class JobNotFoundError(KeyError):
    """Raised when a job ID is not found or has expired."""


@dataclass
class JobInfo:
    """Public job metadata (returned by submit/get/list)."""

    job_id: str
    status: JobStatus
    language: Language
    created_at: datetime
    last_accessed_at: datetime
    total_lines: int
    progress_percent: int
    error_count: int
    message: str | None = None


@dataclass
class _Job:
    """Internal job state."""

    job_id: str
    language: Language
    total_lines: int
    last_accessed: float  # monotonic clock for TTL checks
    cancel_event: threading.Event = field(default_factory=threading.Event)
    status: JobStatus = JobStatus.PENDING
    progress_percent: int = 0
    errors: list[ValidationError] = field(default_factory=list)
    error_message: str | None = None
    messages: list[ResponseMessage] = field(default_factory=list)
    # Wall-clock times for reporting
    created_at_wall: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_accessed_wall: datetime = field(default_factory=lambda: datetime.now(UTC))


class JobManager:
    """Runs validations in a thread pool and keeps their results for a TTL.

    Thread-safe.  Call :meth:`start` to begin the background cleanup thread
    and :meth:`stop` to shut it down.
    """

    def __init__(
        self,
        engine: ValidationEngine | None = None,
        ttl_seconds: float = 900,
        cleanup_interval: float = 60,
        max_workers: int = 4,
    ) -> None:
        self._engine = engine or ValidationEngine()
        self._ttl = ttl_seconds
        self._cleanup_interval = cleanup_interval
        self._lock = threading.Lock()
        self._jobs: dict[str, _Job] = {}
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="validation-job"
        )
        self._stop_event = threading.Event()
        self._cleanup_thread: threading.Thread | None = None

    # -- lifecycle -----------------------------------------------------------

    def start(self) -> None:
        """Start the background cleanup daemon thread."""
        if self._cleanup_thread is not None:
            return
        self._stop_event.clear()
        self._cleanup_thread = threading.Thread(
            target=self._cleanup_loop, daemon=True, name="job-cleanup"
        )
        self._cleanup_thread.start()

    def stop(self) -> None:
        """Cancel running jobs, stop the cleanup thread and the pool."""
        self._stop_event.set()
        with self._lock:
            for job in self._jobs.values():
                job.cancel_event.set()
        if self._cleanup_thread is not None:
            self._cleanup_thread.join(timeout=5)
            self._cleanup_thread = None
        self._executor.shutdown(wait=False, cancel_futures=True)

    # -- public API ----------------------------------------------------------

    def submit(self, content: str, language: Language | str = Language.HTML) -> JobInfo:
        """Queue a document for validation and return its job info."""
        request = ValidateRequest(content=content, language=Language(language))
        job = _Job(
            job_id=secrets.token_hex(8),
            language=request.language,
            total_lines=content.count("\n") + 1,
            last_accessed=time.monotonic(),
        )
        with self._lock:
            self._jobs[job.job_id] = job
        self._executor.submit(self._run, job, request)
        return self._job_info(job)

    def get_job(self, job_id: str) -> JobInfo:
        """Get job info, refreshing its last-accessed time.

        Raises :class:`JobNotFoundError` if the job is missing or expired.
        """
        with self._lock:
            return self._job_info(self._touch(job_id))

    def get_errors(self, job_id: str) -> list[ValidationError]:
        """Errors of a finished job (partial errors for a timed-out one)."""
        with self._lock:
            return list(self._touch(job_id).errors)

    def get_messages(self, job_id: str) -> list[ResponseMessage]:
        """Every response message the job has produced so far, in order."""
        with self._lock:
            return list(self._touch(job_id).messages)

    def cancel(self, job_id: str) -> JobInfo:
        """Request cancellation; finished jobs are left as they are."""
        with self._lock:
            job = self._touch(job_id)
            job.cancel_event.set()
            if job.status not in _FINISHED:
                job.status = JobStatus.CANCELLED
            return self._job_info(job)

    def remove_job(self, job_id: str) -> None:
        """Cancel (if needed) and forget a job."""
        with self._lock:
            job = self._jobs.pop(job_id, None)
        if job is None:
            raise JobNotFoundError(f"Job '{job_id}' not found")
        job.cancel_event.set()

    def list_jobs(self) -> list[JobInfo]:
        """Return info for all non-expired jobs."""
        now_mono = time.monotonic()
        with self._lock:
            return [
                self._job_info(job)
                for job in self._jobs.values()
                if now_mono - job.last_accessed <= self._ttl
            ]

    @property
    def active_count(self) -> int:
        """Number of jobs still pending or running."""
        with self._lock:
            return sum(1 for job in self._jobs.values() if job.status not in _FINISHED)

    # -- internal ------------------------------------------------------------

    def _touch(self, job_id: str) -> _Job:
        """Look up a job under the lock, applying lazy expiration."""
        now_mono = time.monotonic()
        job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFoundError(f"Job '{job_id}' not found")
        if now_mono - job.last_accessed > self._ttl:
            del self._jobs[job_id]
            job.cancel_event.set()
            raise JobNotFoundError(f"Job '{job_id}' has expired")
        job.last_accessed = now_mono
        job.last_accessed_wall = datetime.now(UTC)
        return job

    def _run(self, job: _Job, request: ValidateRequest) -> None:
        with self._lock:
            if job.cancel_event.is_set():
                return
            job.status = JobStatus.RUNNING
        run_request(self._engine, request, lambda msg: self._record(job, msg), job.cancel_event)

    def _record(self, job: _Job, message: ResponseMessage) -> None:
        with self._lock:
            if job.status is JobStatus.CANCELLED:
                return
            job.messages.append(message)
            if isinstance(message, ProgressMessage):
                job.progress_percent = message.progress_percent
            elif isinstance(message, CompleteMessage):
                job.status = JobStatus.COMPLETE
                job.progress_percent = 100
                job.errors = list(message.errors)
            elif isinstance(message, ErrorMessage):
                job.status = JobStatus.ERROR
                job.error_message = message.message
                job.errors = list(message.partial_errors)

    @staticmethod
    def _job_info(job: _Job) -> JobInfo:
        return JobInfo(
            job_id=job.job_id,
            status=job.status,
            language=job.language,
            created_at=job.created_at_wall,
            last_accessed_at=job.last_accessed_wall,
            total_lines=job.total_lines,
            progress_percent=job.progress_percent,
            error_count=len(job.errors),
            message=job.error_message,
        )

    def _purge_expired(self) -> None:
        """Remove all expired jobs (called by cleanup thread)."""
        now_mono = time.monotonic()
        with self._lock:
            expired = [
                jid for jid, job in self._jobs.items() if now_mono - job.last_accessed > self._ttl
            ]
            for jid in expired:
                self._jobs.pop(jid).cancel_event.set()

    def _cleanup_loop(self) -> None:
        """Background loop that periodically purges expired jobs."""
        while not self._stop_event.wait(timeout=self._cleanup_interval):
            self._purge_expired()
