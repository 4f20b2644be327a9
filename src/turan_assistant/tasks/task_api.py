# src/turan_assistant/tasks/task_api.py

from __future__ import annotations

import asyncio
import logging
import time

from ..core.actions import breakdown_key
from ..core.breakdown import break_down_task
from ..core.state import AppState
from .task_models import SubTask, Task, TaskPriority, subtask_id

logger = logging.getLogger(__name__)


def _persist(state: AppState) -> None:
    """Write the whole list back to the store (best-effort, like any UI autosave)."""
    try:
        state.task_store.save(state.tasks)
    except OSError:
        logger.exception("Failed to save %d tasks.", len(state.tasks))


def load_tasks(state: AppState) -> list[Task]:
    state.tasks = state.task_store.load()
    return state.tasks


def new_task_id(state: AppState) -> str:
    """Millisecond timestamp id, bumped until unique within the list."""
    existing = {t.id for t in state.tasks}
    n = int(time.time() * 1000)
    while str(n) in existing:
        n += 1
    return str(n)


def find_task(state: AppState, task_id: str) -> Task | None:
    for t in state.tasks:
        if t.id == task_id:
            return t
    return None


def add_task(state: AppState, title: str, *, priority: TaskPriority = TaskPriority.MEDIUM) -> Task:
    title = (title or "").strip()
    if not title:
        raise ValueError("title is required")

    task = Task(
        id=new_task_id(state),
        title=title,
        completed=False,
        priority=priority,
        created_at=int(time.time() * 1000),
        subtasks=[],
    )
    # Newest first.
    state.tasks.insert(0, task)
    _persist(state)
    logger.info("Task added id=%s", task.id)
    return task


def toggle_task(state: AppState, task_id: str) -> Task | None:
    task = find_task(state, task_id)
    if task is None:
        return None
    task.completed = not task.completed
    _persist(state)
    return task


def delete_task(state: AppState, task_id: str) -> bool:
    before = len(state.tasks)
    state.tasks = [t for t in state.tasks if t.id != task_id]
    if len(state.tasks) == before:
        return False
    _persist(state)
    logger.info("Task deleted id=%s", task_id)
    return True


def toggle_subtask(state: AppState, task_id: str, sub_id: str) -> SubTask | None:
    task = find_task(state, task_id)
    if task is None or not task.subtasks:
        return None
    for sub in task.subtasks:
        if sub.id == sub_id:
            sub.completed = not sub.completed
            _persist(state)
            return sub
    return None


def apply_breakdown(state: AppState, task_id: str, steps: list[str]) -> Task | None:
    """
    Replace the task's subtasks with `steps` in one shot.

    The task may have been deleted while the breakdown was running; the
    result is then dropped.
    """
    task = find_task(state, task_id)
    if task is None:
        logger.info("Breakdown result dropped: task %s no longer exists.", task_id)
        return None
    task.subtasks = [
        SubTask(id=subtask_id(task.id, i), title=title, completed=False)
        for i, title in enumerate(steps)
    ]
    _persist(state)
    return task


def can_break_down(state: AppState, task: Task) -> bool:
    if task.completed or task.subtasks:
        return False
    return not state.actions.is_pending(breakdown_key(task.id))


async def break_down(state: AppState, task_id: str) -> Task | None:
    task = find_task(state, task_id)
    if task is None:
        return None
    steps = await break_down_task(state.llm, task.title)
    return apply_breakdown(state, task_id, steps)


def start_breakdown(state: AppState, task_id: str) -> asyncio.Task[Task | None] | None:
    """
    Kick off a background breakdown for one task.

    Returns None when the task is missing, completed, already split,
    or already being split.
    """
    task = find_task(state, task_id)
    if task is None or not can_break_down(state, task):
        return None
    return state.actions.start(breakdown_key(task_id), break_down(state, task_id))
