# src/turan_assistant/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path

from .task_models import Task

logger = logging.getLogger(__name__)


class TaskStore:
    """
    JSON task store: one file holds the whole task list as a JSON array.

    - load(): missing file -> []; undecodable or non-array value -> [] (reset);
      malformed entries are skipped.
    - save(tasks): atomic replace, file kept private (task titles are personal data).

    There is no schema versioning; the layout is the plain Task.to_dict() array.
    """

    def __init__(self, path: str | Path = "asistan_tasks.json") -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[Task]:
        if not self._path.exists():
            return []

        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.exception("Failed to read tasks from %s; starting empty.", self._path)
            return []

        if not isinstance(data, list):
            logger.warning("Stored tasks at %s are not a list; starting empty.", self._path)
            return []

        out: list[Task] = []
        for raw in data:
            if not isinstance(raw, dict):
                continue
            try:
                out.append(Task.from_dict(raw))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed stored task: %r", raw)

        logger.info("Loaded %d tasks from %s", len(out), self._path)
        return out

    def save(self, tasks: list[Task]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps([t.to_dict() for t in tasks], ensure_ascii=False, indent=2)

        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(payload, "utf-8")
        os.replace(tmp, self._path)
        with contextlib.suppress(OSError):
            os.chmod(self._path, 0o600)

        logger.debug("Saved %d tasks to %s", len(tasks), self._path)
