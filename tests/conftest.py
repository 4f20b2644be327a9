# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from turan_assistant.core.state import AppState
from turan_assistant.tasks.task_store import TaskStore

from .fakes import FakeLLMClient


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="TURAN",
        model="test-model",
        base_url="http://llm.test/v1",
        web_search=True,
        data_dir=tmp_path,
        tasks_path=tmp_path / "asistan_tasks.json",
    )


@pytest.fixture()
def llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture()
def state(settings: SimpleNamespace, llm: FakeLLMClient) -> AppState:
    """
    AppState wired with a fake backend.

    NOTE: We keep the real JSON TaskStore here because persistence is part of
    what we want to test.
    """
    return AppState(
        settings=settings,
        llm=llm,
        task_store=TaskStore(settings.tasks_path),
    )
