# src/turan_assistant/cli/commands.py

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import cast

from ..core.chat import start_conversation
from ..core.errors import PlanGenerationError
from ..core.models import PlannerResult
from ..core.planner import plan_day
from ..core.state import AppState
from ..llm.offline import OfflineLLMClient
from ..tasks.task_api import (
    add_task,
    delete_task,
    start_breakdown,
    toggle_subtask,
    toggle_task,
)
from ..tasks.task_models import Task, TaskPriority

CommandEmitter = Callable[[str], None]
CommandResult = str | Awaitable[str]
CommandHandler2 = Callable[[AppState, list[str]], CommandResult]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], CommandResult]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, /plan, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            result = cast(CommandHandler3, handler)(state, args, emit)
        else:
            result = cast(CommandHandler2, handler)(state, args)

        if inspect.isawaitable(result):
            return await result
        return result

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----


def _ts_local(ms: int) -> str:
    try:
        return datetime.fromtimestamp(ms / 1000).astimezone().strftime("%Y-%m-%d %H:%M")
    except (ValueError, OverflowError, OSError):
        return str(ms)


def format_task(index: int, task: Task) -> str:
    mark = "x" if task.completed else " "
    lines = [f"{index:>2}. [{mark}] {task.title}  ({task.priority.value}, {_ts_local(task.created_at)})"]
    for j, sub in enumerate(task.subtasks or [], start=1):
        sub_mark = "x" if sub.completed else " "
        lines.append(f"      {j}. [{sub_mark}] {sub.title}")
    return "\n".join(lines)


def format_task_list(state: AppState) -> str:
    if not state.tasks:
        return "Henüz görev yok. Güne başlamak için bir tane ekle! (/add <başlık>)"
    return "\n".join(format_task(i, t) for i, t in enumerate(state.tasks, start=1))


def format_plan(plan: PlannerResult) -> str:
    lines = ["Günlük program:"]
    for item in plan.schedule:
        line = f"  {item.time}  {item.activity}"
        if item.description:
            line += f" - {item.description}"
        lines.append(line)
    if plan.tips:
        lines.append("İpuçları:")
        lines.extend(f"  * {tip}" for tip in plan.tips)
    return "\n".join(lines)


def _resolve_task(state: AppState, ref: str) -> Task | None:
    """Accept a 1-based list position or a task id."""
    if ref.isdigit():
        n = int(ref)
        if 1 <= n <= len(state.tasks):
            return state.tasks[n - 1]
    for t in state.tasks:
        if t.id == ref:
            return t
    return None


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    offline = isinstance(state.llm, OfflineLLMClient)
    pending = ", ".join(state.actions.pending_keys()) or "none"
    return (
        "Status:\n"
        f"  backend: {'OFFLINE DEMO' if offline else getattr(settings, 'base_url', '?')}\n"
        f"  model: {getattr(settings, 'model', '?')}\n"
        f"  web search: {'ON' if getattr(settings, 'web_search', True) else 'OFF'}\n"
        f"  tasks: {len(state.tasks)} ({sum(t.completed for t in state.tasks)} done)\n"
        f"  pending actions: {pending}"
    )


def cmd_tasks(state: AppState, args: list[str]) -> str:
    return format_task_list(state)


def cmd_add(state: AppState, args: list[str]) -> str:
    priority = TaskPriority.MEDIUM
    if len(args) >= 2 and args[0] in ("-p", "--priority"):
        priority = TaskPriority.from_raw(args[1])
        args = args[2:]

    title = " ".join(args).strip()
    if not title:
        return "Usage: /add [-p low|medium|high] <title>"

    task = add_task(state, title, priority=priority)
    return f"Added: {task.title}"


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <task#>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No such task: {args[0]}"
    toggle_task(state, task.id)
    return f"{'Completed' if task.completed else 'Reopened'}: {task.title}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /del <task#>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No such task: {args[0]}"
    delete_task(state, task.id)
    return f"Deleted: {task.title}"


def cmd_subtask(state: AppState, args: list[str]) -> str:
    if len(args) < 2 or not args[1].isdigit():
        return "Usage: /sub <task#> <step#>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No such task: {args[0]}"

    n = int(args[1])
    subs = task.subtasks or []
    if not 1 <= n <= len(subs):
        return f"No such step: {args[1]}"

    sub = toggle_subtask(state, task.id, subs[n - 1].id)
    if sub is None:
        return f"No such step: {args[1]}"
    return f"{'Done' if sub.completed else 'Reopened'}: {sub.title}"


def cmd_split(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /split <task#>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No such task: {args[0]}"

    running = start_breakdown(state, task.id)
    if running is None:
        if task.completed:
            return "Completed tasks are not split."
        if task.subtasks:
            return "This task already has steps."
        return "This task is already being split."

    title = task.title

    def _report(done: asyncio.Task[Task | None]) -> None:
        if emit is None or done.cancelled():
            return
        if done.exception() is not None:
            emit(f"Splitting failed: {title}")
            return
        updated = done.result()
        if updated is None:
            return
        steps = "\n".join(f"  {j}. {s.title}" for j, s in enumerate(updated.subtasks or [], start=1))
        emit(f"Steps for '{title}':\n{steps}")

    running.add_done_callback(_report)
    return f"Splitting '{title}' into steps..."


async def cmd_plan(state: AppState, args: list[str]) -> str:
    # ';' separates note lines on a single console line.
    notes = "\n".join(p.strip() for p in " ".join(args).split(";") if p.strip())
    if not notes:
        if state.last_plan is not None:
            return format_plan(state.last_plan)
        return "Usage: /plan <note; note; ...>"

    try:
        plan = await plan_day(state, notes)
    except PlanGenerationError as e:
        logger.info("Plan command failed: %s", e)
        return "Plan oluşturulamadı. Lütfen tekrar dene."
    return format_plan(plan)


def cmd_reset(state: AppState, args: list[str]) -> str:
    start_conversation(state)
    return "Conversation cleared."


registry.register("help", cmd_help, "show this help")
registry.register("status", cmd_status, "show backend and task status")
registry.register("tasks", cmd_tasks, "list tasks", aliases=["ls"])
registry.register("add", cmd_add, "add a task: /add [-p high] <title>")
registry.register("done", cmd_done, "toggle a task: /done <task#>")
registry.register("del", cmd_delete, "delete a task: /del <task#>", aliases=["rm"])
registry.register("sub", cmd_subtask, "toggle a step: /sub <task#> <step#>")
registry.register("split", cmd_split, "split a task into steps with AI: /split <task#>")
registry.register("plan", cmd_plan, "plan the day from notes: /plan <note; note; ...>")
registry.register("reset", cmd_reset, "start a new conversation")
