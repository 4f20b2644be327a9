# src/turan_assistant/core/models.py

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Literal

Role = Literal["user", "model"]


@dataclass(frozen=True, slots=True)
class Source:
    """A web citation attached to a grounded model reply."""

    title: str
    uri: str


@dataclass(frozen=True, slots=True)
class ChatMessage:
    """
    One entry of the conversation. Immutable once appended.

    `sources` is only set on model replies that used web grounding.
    """

    id: str
    role: Role
    text: str
    timestamp: float
    is_error: bool = False
    sources: tuple[Source, ...] | None = None

    @classmethod
    def create(
        cls,
        role: Role,
        text: str,
        *,
        is_error: bool = False,
        sources: tuple[Source, ...] | None = None,
    ) -> ChatMessage:
        return cls(
            id=uuid.uuid4().hex,
            role=role,
            text=text,
            timestamp=time.time(),
            is_error=is_error,
            sources=sources or None,
        )


@dataclass(frozen=True, slots=True)
class ChatReply:
    text: str
    sources: tuple[Source, ...] = ()


@dataclass(frozen=True, slots=True)
class ScheduleItem:
    # `time` is a free-form label ("09:00 - 10:00"); never parsed or sorted.
    time: str
    activity: str
    description: str | None = None


@dataclass(frozen=True, slots=True)
class PlannerResult:
    schedule: tuple[ScheduleItem, ...] = field(default_factory=tuple)
    tips: tuple[str, ...] = field(default_factory=tuple)
