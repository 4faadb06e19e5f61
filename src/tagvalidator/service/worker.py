"""Background validation worker speaking the host-boundary message contract.

A host posts ``VALIDATE`` / ``CANCEL`` requests; the worker answers each
validation with zero or more ``PROGRESS`` messages followed by exactly one
``COMPLETE`` or ``ERROR``.  Once a cancellation is observed nothing more is
emitted for that request.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Mapping
from typing import Any

from tagvalidator.models.messages import (
    CancelRequest,
    CompleteMessage,
    ErrorMessage,
    ProgressMessage,
    ValidateRequest,
    host_request_adapter,
)
from tagvalidator.service.engine import (
    DocumentTooLargeError,
    ProgressUpdate,
    ValidationCancelled,
    ValidationEngine,
    ValidationTimeoutError,
)

logger = logging.getLogger("tagvalidator.worker")

ResponseMessage = ProgressMessage | CompleteMessage | ErrorMessage
Emit = Callable[[ResponseMessage], None]


def run_request(
    engine: ValidationEngine,
    request: ValidateRequest,
    emit: Emit,
    cancel_event: threading.Event,
) -> None:
    """Run one VALIDATE request to completion, streaming responses to *emit*."""

    def _progress(update: ProgressUpdate) -> None:
        emit(
            ProgressMessage(
                processed_lines=update.processed_lines,
                total_lines=update.total_lines,
                progress_percent=update.progress_percent,
            )
        )

    try:
        outcome = engine.run(
            request.content,
            request.language,
            on_progress=_progress,
            cancel_event=cancel_event,
        )
    except ValidationCancelled:
        logger.info("Validation cancelled (%d chars)", len(request.content))
        return
    except ValidationTimeoutError as exc:
        emit(ErrorMessage(message=str(exc), partial_errors=exc.partial_errors))
        return
    except DocumentTooLargeError as exc:
        emit(ErrorMessage(message=str(exc)))
        return
    except Exception as exc:
        # The host must always receive a terminal message.
        logger.exception("Validation failed unexpectedly")
        emit(ErrorMessage(message=f"Validation failed: {exc}"))
        return

    if cancel_event.is_set():
        return
    emit(CompleteMessage(errors=outcome.errors))


class ValidationWorker:
    """Processes validation requests one at a time on a daemon thread.

    Call :meth:`start` before posting and :meth:`stop` to shut down.
    ``CANCEL`` applies to every request posted before it, including the one
    currently running; requests posted afterwards are unaffected.
    """

    def __init__(self, emit: Emit, engine: ValidationEngine | None = None) -> None:
        self._emit = emit
        self._engine = engine or ValidationEngine()
        self._queue: queue.Queue[tuple[ValidateRequest, threading.Event] | None] = queue.Queue()
        self._lock = threading.Lock()
        self._pending: list[threading.Event] = []
        self._thread: threading.Thread | None = None

    # -- lifecycle -----------------------------------------------------------

    def start(self) -> None:
        """Start the worker thread."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._run_loop, daemon=True, name="validation-worker"
        )
        self._thread.start()

    def stop(self, timeout: float = 5) -> None:
        """Cancel outstanding work and wait for the thread to exit."""
        self.cancel()
        self._queue.put(None)
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def join(self) -> None:
        """Block until every posted request has been processed."""
        self._queue.join()

    # -- public API ----------------------------------------------------------

    def post(self, message: ValidateRequest | CancelRequest | Mapping[str, Any]) -> None:
        """Accept a request message (model instance or plain mapping)."""
        if not isinstance(message, ValidateRequest | CancelRequest):
            message = host_request_adapter.validate_python(message)
        if isinstance(message, CancelRequest):
            self.cancel()
            return
        event = threading.Event()
        with self._lock:
            self._pending.append(event)
        self._queue.put((message, event))

    def cancel(self) -> None:
        """Raise the cancel flag of every queued or running request."""
        with self._lock:
            for event in self._pending:
                event.set()

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    # -- internal ------------------------------------------------------------

    def _run_loop(self) -> None:
        while True:
            item = self._queue.get()
            if item is None:
                self._queue.task_done()
                break
            request, event = item
            try:
                if not event.is_set():
                    run_request(self._engine, request, self._emit, event)
            finally:
                with self._lock:
                    self._pending.remove(event)
                self._queue.task_done()
