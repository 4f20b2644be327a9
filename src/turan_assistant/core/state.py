# src/turan_assistant/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..tasks.task_models import Task
from .actions import PendingActions
from .models import ChatMessage, PlannerResult
from .ports import LLMClient, TaskRepo


@dataclass
class AppState:
    """
    Everything the front end works with.

    Collaborators (backend, task store) are injected; `tasks` mirrors the stored
    list and is written back through `task_store.save` on every mutation.
    Conversation and plan are transient and never persisted.
    """

    settings: Any
    llm: LLMClient
    task_store: TaskRepo

    tasks: list[Task] = field(default_factory=list)
    conversation: list[ChatMessage] = field(default_factory=list)
    last_plan: PlannerResult | None = None
    actions: PendingActions = field(default_factory=PendingActions)
