# src/turan_assistant/core/actions.py

"""
In-flight user actions keyed by action id.

Each user-initiated adapter call (a breakdown of one task, a plan, a chat
turn) runs as its own asyncio task so independent actions can overlap and
the front end can show which ones are still pending. There is no coalescing:
a second start for a pending key returns the running task, or cancels it
first when `supersede=True`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def breakdown_key(task_id: str) -> str:
    return f"breakdown:{task_id}"


class PendingActions:
    def __init__(self) -> None:
        self._running: dict[str, asyncio.Task[Any]] = {}

    def is_pending(self, key: str) -> bool:
        task = self._running.get(key)
        return task is not None and not task.done()

    def pending_keys(self) -> list[str]:
        return [k for k, t in self._running.items() if not t.done()]

    def start(
        self,
        key: str,
        coro: Coroutine[Any, Any, T],
        *,
        supersede: bool = False,
    ) -> asyncio.Task[T]:
        """Schedule `coro` under `key`. Must be called from a running event loop."""
        current = self._running.get(key)
        if current is not None and not current.done():
            if not supersede:
                coro.close()
                logger.debug("Action %s already pending; reusing it.", key)
                return current
            logger.info("Action %s superseded; cancelling the earlier run.", key)
            current.cancel()

        task = asyncio.create_task(coro, name=key)
        self._running[key] = task

        def _forget(done: asyncio.Task[Any]) -> None:
            if self._running.get(key) is done:
                del self._running[key]

        task.add_done_callback(_forget)
        return task

    async def wait_all(self) -> None:
        tasks = [t for t in self._running.values() if not t.done()]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def cancel_all(self) -> None:
        for task in list(self._running.values()):
            task.cancel()
