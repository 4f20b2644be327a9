# src/turan_assistant/core/errors.py

"""
Failure taxonomy shared by the LLM backend and the AI adapters.

Only TransportFailure is raised by the backend. Schema problems and empty
payloads are decode results (see llm/decode.py); the adapters turn them into
the surfaced errors below or swallow them, depending on the operation.
"""

from __future__ import annotations

from enum import StrEnum


class FailureKind(StrEnum):
    TRANSPORT = "transport"
    SCHEMA_VIOLATION = "schema_violation"
    EMPTY_RESPONSE = "empty_response"


class AdapterError(RuntimeError):
    """Base class for every error an adapter lets escape."""

    default_message = "LLM request failed."

    def __init__(self, message: str | None = None, *, kind: FailureKind) -> None:
        super().__init__(message or self.default_message)
        self.kind = kind


class TransportFailure(AdapterError):
    """Backend unreachable, timed out, or answered with a non-2xx status."""

    default_message = "LLM backend request failed."

    def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
        super().__init__(message, kind=FailureKind.TRANSPORT)
        self.status_code = status_code


class ChatSendError(AdapterError):
    default_message = "Mesaj gönderilirken bir hata oluştu."


class PlanGenerationError(AdapterError):
    default_message = "Plan oluşturulurken bir hata meydana geldi."
