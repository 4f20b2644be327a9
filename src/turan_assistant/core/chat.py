# src/turan_assistant/core/chat.py

"""
Chat with the TURAN persona.

The backend keeps no session: every call rebuilds it from the caller's
history (oldest first), adds the persona system prompt, enables web search
and sends the new utterance as the last turn.

Key invariants:
- every history entry is replayed, oldest first, error notices included,
- the conversation on AppState is append-only; a failed send appends an error
  message instead of dropping anything,
- no automatic retry.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..llm.decode import Ok, decode_text, extract_sources
from .errors import ChatSendError, FailureKind, TransportFailure
from .models import ChatMessage, ChatReply
from .persona import CHAT_ERROR_REPLY, WELCOME_MESSAGE, get_system_prompt
from .ports import LLMClient, LLMMessage
from .state import AppState

logger = logging.getLogger(__name__)

_WIRE_ROLES = {"user": "user", "model": "assistant"}


def build_chat_messages(message: str, history: Sequence[ChatMessage]) -> list[LLMMessage]:
    """Replay `history` as user/assistant turns, then the new user message."""
    out: list[LLMMessage] = [{"role": _WIRE_ROLES[m.role], "content": m.text} for m in history]
    out.append({"role": "user", "content": message})
    return out


async def send_chat_message(
    llm: LLMClient,
    message: str,
    history: Sequence[ChatMessage],
    *,
    web_search: bool = True,
) -> ChatReply:
    """
    Send one user message in the context of `history`.

    Returns the reply text and its web sources (backend order).
    Raises ChatSendError for every failure kind.
    """
    messages = build_chat_messages(message, history)

    try:
        payload = await llm.complete(
            messages,
            system_prompt=get_system_prompt(),
            web_search=web_search,
        )
    except TransportFailure as e:
        logger.info("Chat send failed (%s): %s", e.kind, e)
        raise ChatSendError(kind=e.kind) from e
    except Exception as e:
        logger.exception("Chat send crashed.")
        raise ChatSendError(kind=FailureKind.TRANSPORT) from e

    result = decode_text(payload)
    if not isinstance(result, Ok):
        logger.info("Chat reply unusable (%s): %s", result.kind, result.reason)
        raise ChatSendError(kind=result.kind)

    sources = extract_sources(payload)
    logger.debug("Chat reply len=%d sources=%d", len(result.value), len(sources))
    return ChatReply(text=result.value, sources=sources)


def start_conversation(state: AppState) -> None:
    """Reset the transient conversation to the greeting."""
    state.conversation = [ChatMessage.create("model", WELCOME_MESSAGE)]


async def reply(state: AppState, text: str) -> ChatMessage:
    """
    Append the user's message, ask the backend, append the answer.

    On ChatSendError an error message is appended (and returned) instead;
    earlier messages are kept so the conversation stays usable.
    """
    history = list(state.conversation)
    user_msg = ChatMessage.create("user", text.strip())
    state.conversation.append(user_msg)

    web_search = bool(getattr(state.settings, "web_search", True))
    try:
        answer = await send_chat_message(state.llm, user_msg.text, history, web_search=web_search)
    except ChatSendError as e:
        logger.info("Chat turn failed: %s", e)
        msg = ChatMessage.create("model", CHAT_ERROR_REPLY, is_error=True)
    else:
        msg = ChatMessage.create("model", answer.text, sources=answer.sources)

    state.conversation.append(msg)
    return msg
