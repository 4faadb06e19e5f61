"""Host-boundary messages exchanged with a background validation worker.

Requests flow host → worker (``VALIDATE`` / ``CANCEL``); responses flow
worker → host: zero or more ``PROGRESS`` followed by exactly one of
``COMPLETE`` or ``ERROR``.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter

from tagvalidator.models.errors import ValidationError
from tagvalidator.models.tokens import Language


class ValidateRequest(BaseModel):
    kind: Literal["VALIDATE"] = "VALIDATE"
    content: str
    language: Language = Language.HTML


class CancelRequest(BaseModel):
    kind: Literal["CANCEL"] = "CANCEL"


class ProgressMessage(BaseModel):
    kind: Literal["PROGRESS"] = "PROGRESS"
    processed_lines: int = Field(alias="processedLines")
    total_lines: int = Field(alias="totalLines")
    progress_percent: int = Field(alias="progressPercent")

    model_config = {"populate_by_name": True}


class CompleteMessage(BaseModel):
    kind: Literal["COMPLETE"] = "COMPLETE"
    errors: list[ValidationError] = []


class ErrorMessage(BaseModel):
    """Engine-level failure (timeout, oversized document, crash)."""

    kind: Literal["ERROR"] = "ERROR"
    message: str
    partial_errors: list[ValidationError] = Field([], alias="partialErrors")

    model_config = {"populate_by_name": True}


HostRequest = Annotated[ValidateRequest | CancelRequest, Field(discriminator="kind")]
HostResponse = Annotated[
    ProgressMessage | CompleteMessage | ErrorMessage, Field(discriminator="kind")
]

host_request_adapter: TypeAdapter[ValidateRequest | CancelRequest] = TypeAdapter(HostRequest)
host_response_adapter: TypeAdapter[ProgressMessage | CompleteMessage | ErrorMessage] = (
    TypeAdapter(HostResponse)
)
