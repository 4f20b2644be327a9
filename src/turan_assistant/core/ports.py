# src/turan_assistant/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The adapters depend on Protocols instead of concrete implementations.
This keeps the LLM provider and the task storage swappable and makes testing easier.
"""

from typing import Any, Literal, Protocol, TypedDict

from ..tasks.task_models import Task


class LLMMessage(TypedDict):
    # OpenAI-style wire message.
    role: Literal["system", "user", "assistant"]
    content: str


class ResponseSchema(TypedDict):
    name: str
    schema: dict[str, Any]


class LLMClient(Protocol):
    """
    One-shot chat completion client (OpenAI/OpenRouter-compatible).

    Returns the raw completion payload as plain JSON-like data.
    Raises TransportFailure for any network/backend problem.
    """

    async def complete(
        self,
        messages: list[LLMMessage],
        *,
        system_prompt: str | None = None,
        response_schema: ResponseSchema | None = None,
        web_search: bool = False,
    ) -> dict[str, Any]: ...


class TaskRepo(Protocol):
    """Single-slot durable storage for the whole task list."""

    def load(self) -> list[Task]: ...
    def save(self, tasks: list[Task]) -> None: ...
