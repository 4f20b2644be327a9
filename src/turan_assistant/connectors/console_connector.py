# src/turan_assistant/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.chat import reply
from ..core.models import ChatMessage
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, just print a new line.
    """
    if sys.stdout.isatty():
        sys.stdout.write("\033[1A\033[2K\r")
        sys.stdout.write(line + "\n")
        sys.stdout.flush()
    else:
        print(line)


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def format_chat_message(msg: ChatMessage, app_name: str) -> str:
    who = app_name if msg.role == "model" else "You"
    lines = [f"<<< {who}: {msg.text}"]
    for i, src in enumerate(msg.sources or (), start=1):
        lines.append(f"    [{i}] {src.title} - {src.uri}")
    return "\n".join(lines)


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    app_name = str(getattr(state.settings, "app_name", "TURAN"))

    _print_ts("[CONSOLE] Type your messages. Use /help for commands. Use /exit to quit.\n")
    for msg in state.conversation:
        _print_ts(format_chat_message(msg, app_name))

    while True:
        try:
            user_input = (await asyncio.to_thread(input, ">>> You: ")).strip()
            _rewrite_prev_line(f"[{_ts_local()}] >>> You: {user_input}")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        # Commands (/help, /add, /plan, ...)
        try:
            cmd_response = await command_registry.handle(state, user_input, emit=_print_ts)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is not None:
            _print_ts(cmd_response)
            continue

        # Normal chat: one request, one reply (or an error notice).
        answer = await reply(state, user_input)
        _print_ts(format_chat_message(answer, app_name))

    logger.info("Console connector finished.")
