# src/turan_assistant/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_raw(cls, raw: Any) -> TaskPriority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.MEDIUM


# 9999-12-31T23:59:59.999Z, the last instant datetime can represent.
_MAX_CREATED_AT_MS = 253_402_300_799_999


def _created_at_ms(raw: Any) -> int:
    try:
        ms = int(raw or 0)
    except OverflowError as e:
        raise ValueError(f"createdAt out of range: {raw!r}") from e
    if not 0 <= ms <= _MAX_CREATED_AT_MS:
        raise ValueError(f"createdAt out of range: {raw!r}")
    return ms


def subtask_id(task_id: str, index: int) -> str:
    """Subtask ids are derived from the parent id and the position."""
    return f"{task_id}_sub_{index}"


@dataclass(slots=True)
class SubTask:
    id: str
    title: str
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "completed": self.completed}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> SubTask:
        return cls(
            id=str(raw["id"]),
            title=str(raw["title"]),
            completed=bool(raw.get("completed", False)),
        )


@dataclass(slots=True)
class Task:
    """
    A task-list entry.

    Notes:
    - `created_at` is epoch milliseconds, stored as `createdAt`.
    - `subtasks` is None until an AI breakdown fills it in one shot.
    - completing a task does not touch its subtasks.
    """

    id: str
    title: str
    completed: bool
    priority: TaskPriority
    created_at: int
    subtasks: list[SubTask] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
            "priority": self.priority.value,
            "createdAt": self.created_at,
        }
        if self.subtasks is not None:
            out["subtasks"] = [s.to_dict() for s in self.subtasks]
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        """Raises KeyError/TypeError/ValueError on structurally incompatible input."""
        subtasks_raw = raw.get("subtasks")
        subtasks: list[SubTask] | None = None
        if subtasks_raw is not None:
            if not isinstance(subtasks_raw, list):
                raise TypeError("subtasks must be a list")
            subtasks = [SubTask.from_dict(s) for s in subtasks_raw]

        return cls(
            id=str(raw["id"]),
            title=str(raw["title"]),
            completed=bool(raw.get("completed", False)),
            priority=TaskPriority.from_raw(raw.get("priority")),
            created_at=_created_at_ms(raw.get("createdAt")),
            subtasks=subtasks,
        )
