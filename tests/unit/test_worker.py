"""Unit tests for the background validation worker and its message contract."""

from __future__ import annotations

import threading

import pytest
from pydantic import ValidationError as PydanticValidationError

from tagvalidator.models.messages import (
    CancelRequest,
    CompleteMessage,
    ErrorMessage,
    ProgressMessage,
    ValidateRequest,
    host_request_adapter,
    host_response_adapter,
)
from tagvalidator.service.engine import ValidationEngine
from tagvalidator.service.worker import ResponseMessage, ValidationWorker, run_request


class _Collector:
    def __init__(self) -> None:
        self.messages: list[ResponseMessage] = []
        self._lock = threading.Lock()

    def __call__(self, message: ResponseMessage) -> None:
        with self._lock:
            self.messages.append(message)


def _assert_contract(messages: list[ResponseMessage]) -> None:
    """PROGRESS* followed by exactly one terminal message."""
    assert messages
    *progress, terminal = messages
    assert all(isinstance(m, ProgressMessage) for m in progress)
    assert isinstance(terminal, CompleteMessage | ErrorMessage)


class TestMessages:
    def test_request_discriminated_on_kind(self) -> None:
        req = host_request_adapter.validate_python(
            {"kind": "VALIDATE", "content": "<a>", "language": "xml"}
        )
        assert isinstance(req, ValidateRequest)
        assert req.language == "xml"
        assert isinstance(host_request_adapter.validate_python({"kind": "CANCEL"}), CancelRequest)

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            host_request_adapter.validate_python({"kind": "PAUSE"})

    def test_progress_wire_names(self) -> None:
        msg = ProgressMessage(processed_lines=5, total_lines=10, progress_percent=50)
        assert msg.model_dump(by_alias=True) == {
            "kind": "PROGRESS",
            "processedLines": 5,
            "totalLines": 10,
            "progressPercent": 50,
        }

    def test_response_roundtrip_from_json(self) -> None:
        msg = host_response_adapter.validate_json('{"kind": "ERROR", "message": "boom"}')
        assert isinstance(msg, ErrorMessage)
        assert msg.partial_errors == []


class TestRunRequest:
    def test_complete(self, engine: ValidationEngine) -> None:
        out = _Collector()
        run_request(engine, ValidateRequest(content="<div>"), out, threading.Event())
        _assert_contract(out.messages)
        terminal = out.messages[-1]
        assert isinstance(terminal, CompleteMessage)
        assert [e.tag for e in terminal.errors] == ["div"]

    def test_timeout_is_error_with_partial_errors(self) -> None:
        out = _Collector()
        engine = ValidationEngine(timeout_seconds=0)
        run_request(engine, ValidateRequest(content="</a>"), out, threading.Event())
        _assert_contract(out.messages)
        terminal = out.messages[-1]
        assert isinstance(terminal, ErrorMessage)
        assert "timeout" in terminal.message

    def test_too_large_is_error(self) -> None:
        out = _Collector()
        engine = ValidationEngine(max_document_chars=3)
        run_request(engine, ValidateRequest(content="<div>"), out, threading.Event())
        assert len(out.messages) == 1
        assert isinstance(out.messages[0], ErrorMessage)

    def test_cancelled_emits_nothing(self, engine: ValidationEngine) -> None:
        out = _Collector()
        event = threading.Event()
        event.set()
        run_request(engine, ValidateRequest(content="<div>"), out, event)
        assert out.messages == []

    def test_cancel_mid_run_stops_emitting(self, engine: ValidationEngine) -> None:
        event = threading.Event()
        messages: list[ResponseMessage] = []

        def _emit(message: ResponseMessage) -> None:
            messages.append(message)
            if isinstance(message, ProgressMessage) and message.progress_percent >= 5:
                event.set()

        run_request(engine, ValidateRequest(content="<p>x</p>\n" * 300), _emit, event)
        assert all(isinstance(m, ProgressMessage) for m in messages)
        assert messages[-1].progress_percent < 100


class TestValidationWorker:
    def test_validate_then_complete(self) -> None:
        out = _Collector()
        worker = ValidationWorker(out)
        worker.start()
        try:
            worker.post({"kind": "VALIDATE", "content": "<a><b></a>", "language": "html"})
            worker.join()
        finally:
            worker.stop()
        _assert_contract(out.messages)
        terminal = out.messages[-1]
        assert isinstance(terminal, CompleteMessage)
        assert {e.type for e in terminal.errors} == {"MISMATCH", "MISSING_CLOSE"}

    def test_requests_processed_in_order(self) -> None:
        out = _Collector()
        worker = ValidationWorker(out)
        worker.start()
        try:
            worker.post(ValidateRequest(content="</x>"))
            worker.post(ValidateRequest(content="<ok></ok>"))
            worker.join()
        finally:
            worker.stop()
        terminals = [m for m in out.messages if isinstance(m, CompleteMessage)]
        assert [len(t.errors) for t in terminals] == [1, 0]

    def test_cancel_applies_to_queued_requests(self) -> None:
        out = _Collector()
        worker = ValidationWorker(out)
        worker.post(ValidateRequest(content="<div>"))
        worker.post(CancelRequest())
        worker.start()
        try:
            worker.join()
        finally:
            worker.stop()
        assert out.messages == []
        assert worker.pending_count == 0

    def test_cancel_does_not_affect_later_requests(self) -> None:
        out = _Collector()
        worker = ValidationWorker(out)
        worker.post(ValidateRequest(content="<div>"))
        worker.post({"kind": "CANCEL"})
        worker.post(ValidateRequest(content="<span>"))
        worker.start()
        try:
            worker.join()
        finally:
            worker.stop()
        _assert_contract(out.messages)
        terminal = out.messages[-1]
        assert isinstance(terminal, CompleteMessage)
        assert [e.tag for e in terminal.errors] == ["span"]

    def test_engine_failure_reported(self, monkeypatch: pytest.MonkeyPatch) -> None:
        out = _Collector()
        engine = ValidationEngine()

        def _boom(*args: object, **kwargs: object) -> None:
            raise RuntimeError("tokenizer exploded")

        monkeypatch.setattr(engine, "run", _boom)
        worker = ValidationWorker(out, engine=engine)
        worker.start()
        try:
            worker.post(ValidateRequest(content="<a>"))
            worker.join()
        finally:
            worker.stop()
        assert len(out.messages) == 1
        terminal = out.messages[0]
        assert isinstance(terminal, ErrorMessage)
        assert terminal.message == "Validation failed: tokenizer exploded"
