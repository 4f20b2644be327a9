# tests/test_chat.py

from __future__ import annotations

import pytest

from turan_assistant.core.chat import build_chat_messages, reply, send_chat_message, start_conversation
from turan_assistant.core.errors import ChatSendError, FailureKind, TransportFailure
from turan_assistant.core.models import ChatMessage, ChatReply, Source
from turan_assistant.core.persona import CHAT_ERROR_REPLY, FLAG_SIGNATURES, WELCOME_MESSAGE

from .fakes import FakeLLMClient, completion


def _msg(role: str, text: str, *, is_error: bool = False) -> ChatMessage:
    return ChatMessage.create(role, text, is_error=is_error)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_chat_returns_text_and_grounding_sources() -> None:
    payload = completion("Bugün İstanbul güneşli. 🇹🇷")
    payload["choices"][0]["grounding_metadata"] = {
        "grounding_chunks": [{"web": {"title": "Kaynak A", "uri": "https://x"}}]
    }
    llm = FakeLLMClient(payload=payload)

    result = await send_chat_message(llm, "Hava durumu nasıl?", [])

    assert result == ChatReply(
        text="Bugün İstanbul güneşli. 🇹🇷",
        sources=(Source(title="Kaynak A", uri="https://x"),),
    )


@pytest.mark.asyncio
async def test_chat_reads_url_citation_annotations_in_order() -> None:
    payload = completion(
        "Cevap",
        annotations=[
            {"type": "url_citation", "url_citation": {"url": "https://a", "title": "A"}},
            {"type": "url_citation", "url_citation": {"url": "https://b"}},
            {"type": "url_citation", "url_citation": {"title": "no uri"}},
            {"type": "file_citation", "file_citation": {"file_id": "f"}},
        ],
    )
    llm = FakeLLMClient(payload=payload)

    result = await send_chat_message(llm, "soru", [])

    assert result.sources == (
        Source(title="A", uri="https://a"),
        Source(title="Kaynak", uri="https://b"),
    )


@pytest.mark.asyncio
async def test_chat_without_citations_has_no_sources() -> None:
    llm = FakeLLMClient("Merhaba! 🇦🇿")

    result = await send_chat_message(llm, "selam", [])
    assert result.sources == ()


@pytest.mark.asyncio
async def test_chat_replays_history_in_order_before_new_message() -> None:
    history = [
        _msg("model", WELCOME_MESSAGE),
        _msg("user", "birinci"),
        _msg("model", "ikinci"),
        _msg("user", "üçüncü"),
        _msg("model", CHAT_ERROR_REPLY, is_error=True),
    ]
    llm = FakeLLMClient("tamam")

    await send_chat_message(llm, "yeni", history)

    assert llm.calls[0].messages == [
        {"role": "assistant", "content": WELCOME_MESSAGE},
        {"role": "user", "content": "birinci"},
        {"role": "assistant", "content": "ikinci"},
        {"role": "user", "content": "üçüncü"},
        {"role": "assistant", "content": CHAT_ERROR_REPLY},
        {"role": "user", "content": "yeni"},
    ]


def test_reordered_history_changes_only_the_replayed_order() -> None:
    a, b = _msg("user", "a"), _msg("model", "b")

    assert build_chat_messages("m", [a, b])[:2] == [
        {"role": "user", "content": "a"},
        {"role": "assistant", "content": "b"},
    ]
    assert build_chat_messages("m", [b, a])[:2] == [
        {"role": "assistant", "content": "b"},
        {"role": "user", "content": "a"},
    ]


@pytest.mark.asyncio
async def test_chat_passes_persona_and_enables_web_search() -> None:
    llm = FakeLLMClient("ok")

    await send_chat_message(llm, "merhaba", [])

    call = llm.calls[0]
    assert call.web_search is True
    assert call.system_prompt is not None
    assert "TURAN" in call.system_prompt
    assert "SADECE BİR TANESİNİ" in call.system_prompt
    for flag in FLAG_SIGNATURES:
        assert flag in call.system_prompt


@pytest.mark.asyncio
async def test_chat_transport_failure_surfaces_single_error() -> None:
    llm = FakeLLMClient(error=TransportFailure("offline"))

    with pytest.raises(ChatSendError) as ei:
        await send_chat_message(llm, "merhaba", [])
    assert ei.value.kind == FailureKind.TRANSPORT
    assert str(ei.value) == "Mesaj gönderilirken bir hata oluştu."
    assert len(llm.calls) == 1


@pytest.mark.parametrize(
    ("payload", "kind"),
    [
        (completion(""), FailureKind.EMPTY_RESPONSE),
        (completion("   "), FailureKind.EMPTY_RESPONSE),
        ("not a payload", FailureKind.SCHEMA_VIOLATION),
    ],
)
@pytest.mark.asyncio
async def test_chat_unusable_reply_surfaces_error(payload, kind) -> None:
    llm = FakeLLMClient(payload=payload)

    with pytest.raises(ChatSendError) as ei:
        await send_chat_message(llm, "merhaba", [])
    assert ei.value.kind == kind


@pytest.mark.asyncio
async def test_reply_appends_user_and_model_messages(state, llm) -> None:
    start_conversation(state)
    llm.next_text = "Harika bir gün! 🇰🇿"

    answer = await reply(state, "  günaydın ")

    assert [m.role for m in state.conversation] == ["model", "user", "model"]
    assert state.conversation[1].text == "günaydın"
    assert answer is state.conversation[-1]
    assert answer.text == "Harika bir gün! 🇰🇿"
    assert answer.is_error is False
    # History sent to the backend excludes the message being sent.
    assert llm.calls[0].messages[-1] == {"role": "user", "content": "günaydın"}
    assert len(llm.calls[0].messages) == 2


@pytest.mark.asyncio
async def test_reply_failure_appends_error_and_keeps_history(state, llm) -> None:
    start_conversation(state)
    llm.next_text = "ilk cevap"
    await reply(state, "ilk")

    llm.error = TransportFailure("down")
    answer = await reply(state, "ikinci")

    assert answer.is_error is True
    assert answer.text == CHAT_ERROR_REPLY
    assert [m.text for m in state.conversation] == [
        WELCOME_MESSAGE,
        "ilk",
        "ilk cevap",
        "ikinci",
        CHAT_ERROR_REPLY,
    ]


@pytest.mark.asyncio
async def test_reply_respects_web_search_setting(state, llm) -> None:
    state.settings.web_search = False

    await reply(state, "selam")
    assert llm.calls[0].web_search is False


@pytest.mark.asyncio
async def test_turns_keep_alternating_after_a_failed_send(state, llm) -> None:
    start_conversation(state)
    await reply(state, "ilk")
    llm.error = TransportFailure("down")
    await reply(state, "ikinci")

    llm.error = None
    llm.next_text = "geri geldim"
    await reply(state, "üçüncü")

    roles = [m["role"] for m in llm.calls[-1].messages]
    assert roles == ["assistant", "user", "assistant", "user", "assistant", "user"]
    assert llm.calls[-1].messages[-2] == {"role": "assistant", "content": CHAT_ERROR_REPLY}
    assert state.conversation[-1].text == "geri geldim"
