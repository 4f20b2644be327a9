# src/turan_assistant/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires concrete implementations into AppState (LLM backend, task store),
- loads the persisted task list and greets the user.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.chat import start_conversation
from ..core.ports import LLMClient
from ..core.state import AppState
from ..llm.client import OpenRouterLLMClient
from ..llm.offline import OfflineLLMClient
from ..tasks.task_api import load_tasks
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    llm_client: LLMClient
    try:
        llm_client = OpenRouterLLMClient(settings)
    except RuntimeError as e:
        # Demo mode for local runs without an API key.
        logger.warning("%s Falling back to offline demo mode.", e)
        llm_client = OfflineLLMClient()

    state = AppState(
        settings=settings,
        llm=llm_client,
        task_store=TaskStore(settings.tasks_path),
    )
    load_tasks(state)
    start_conversation(state)
    return state
