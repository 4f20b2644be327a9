# src/turan_assistant/llm/offline.py

from __future__ import annotations

import json
from typing import Any

from ..core.persona import FLAG_SIGNATURES
from ..core.planner import NOTES_HEADER
from ..core.ports import LLMMessage, ResponseSchema


def _completion(content: str) -> dict[str, Any]:
    return {
        "id": "offline",
        "object": "chat.completion",
        "model": "offline",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
    }


def _last_user_text(messages: list[LLMMessage]) -> str:
    for m in reversed(messages):
        if m["role"] == "user":
            return m["content"]
    return ""


class OfflineLLMClient:
    """
    Offline deterministic LLM client used for demos when no external API is configured.

    Behavior:
    - task breakdown schema -> three generic steps
    - daily plan schema -> one schedule slot per non-empty note line
    - normal chat -> a friendly offline demo response (signed with a flag)
    """

    async def complete(
        self,
        messages: list[LLMMessage],
        *,
        system_prompt: str | None = None,
        response_schema: ResponseSchema | None = None,
        web_search: bool = False,
    ) -> dict[str, Any]:
        name = response_schema["name"] if response_schema else ""

        if name == "task_breakdown":
            steps = ["Hazırlık yap", "Görevi uygula", "Sonucu kontrol et"]
            return _completion(json.dumps({"steps": steps}, ensure_ascii=False))

        if name == "daily_plan":
            return _completion(json.dumps(self._plan(_last_user_text(messages)), ensure_ascii=False))

        user_text = _last_user_text(messages)
        return _completion(
            "Çevrimdışı demo modu: harici bir LLM yapılandırılmadı.\n"
            "Gerçek yanıtlar için TURAN_API_KEY ayarla.\n\n"
            f"Yazdığın: {user_text} {FLAG_SIGNATURES[0]}"
        )

    @staticmethod
    def _plan(prompt: str) -> dict[str, Any]:
        notes = prompt.split(NOTES_HEADER, 1)[-1]
        lines = [ln.strip(" -*\t") for ln in notes.splitlines() if ln.strip(" -*\t")]
        schedule = [
            {"time": f"{9 + i:02d}:00 - {10 + i:02d}:00", "activity": line}
            for i, line in enumerate(lines[:8])
        ]
        return {
            "schedule": schedule,
            "tips": ["Zor işleri sabah saatlerine koy.", "Her saat başı kısa bir mola ver."],
        }
