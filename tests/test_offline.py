# tests/test_offline.py

from __future__ import annotations

import pytest

from turan_assistant.core.breakdown import FALLBACK_STEPS, break_down_task
from turan_assistant.core.chat import send_chat_message
from turan_assistant.core.persona import count_flag_signatures
from turan_assistant.core.planner import generate_daily_plan
from turan_assistant.llm.offline import OfflineLLMClient


@pytest.mark.asyncio
async def test_offline_breakdown_is_schema_valid() -> None:
    steps = await break_down_task(OfflineLLMClient(), "Evi temizle")

    assert 3 <= len(steps) <= 5
    assert steps != list(FALLBACK_STEPS)


@pytest.mark.asyncio
async def test_offline_plan_uses_note_lines() -> None:
    plan = await generate_daily_plan(OfflineLLMClient(), "- spor\n\nmarket alışverişi\n")

    assert [item.activity for item in plan.schedule] == ["spor", "market alışverişi"]
    assert plan.schedule[0].time == "09:00 - 10:00"
    assert plan.tips


@pytest.mark.asyncio
async def test_offline_chat_echoes_and_signs() -> None:
    reply = await send_chat_message(OfflineLLMClient(), "merhaba", [])

    assert "merhaba" in reply.text
    assert count_flag_signatures(reply.text) == 1
    assert reply.sources == ()
