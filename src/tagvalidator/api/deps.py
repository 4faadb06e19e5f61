"""Dependency injection for FastAPI: JobManager singleton and the engine."""

from __future__ import annotations

from fastapi import Request

from tagvalidator.service.engine import ValidationEngine
from tagvalidator.service.jobs import JobManager

_job_manager: JobManager | None = None
_disable_job_list: bool = False


def init_job_manager(manager: JobManager, *, disable_job_list: bool = False) -> None:
    """Set the global JobManager (called at app startup)."""
    global _job_manager, _disable_job_list  # noqa: PLW0603
    _job_manager = manager
    _disable_job_list = disable_job_list


def get_job_manager() -> JobManager:
    """FastAPI ``Depends`` provider for JobManager."""
    if _job_manager is None:
        raise RuntimeError("JobManager not initialised; call init_job_manager() first")
    return _job_manager


def is_job_list_disabled() -> bool:
    """Return True when the GET /jobs endpoint is suppressed."""
    return _disable_job_list


def reset_job_manager() -> None:
    """Clear the global JobManager (for tests)."""
    global _job_manager, _disable_job_list  # noqa: PLW0603
    _job_manager = None
    _disable_job_list = False


def get_engine(request: Request) -> ValidationEngine:
    """FastAPI ``Depends`` provider for the app's ValidationEngine."""
    engine: ValidationEngine = request.app.state.engine
    return engine
