# src/turan_assistant/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console REPL on an
asyncio event loop. Pending background actions are awaited on exit.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)

_SHUTDOWN_GRACE_SECONDS = 30.0


async def _run(state: AppState) -> None:
    try:
        await run_console_loop(state)
    finally:
        pending = state.actions.pending_keys()
        if pending:
            logger.info("Waiting for %d pending action(s): %s", len(pending), ", ".join(pending))
            try:
                await asyncio.wait_for(state.actions.wait_all(), timeout=_SHUTDOWN_GRACE_SECONDS)
            except TimeoutError:
                logger.warning("Pending actions did not finish in time; cancelling.")
                state.actions.cancel_all()


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)

    try:
        asyncio.run(_run(state))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
