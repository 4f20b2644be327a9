# src/turan_assistant/core/planner.py

"""
Daily plan generation.

Free-form notes go in, a structured schedule plus a few tips come out. The
shape is enforced by the backend (JSON schema) and re-validated by the
decoder; there is no fallback plan on failure.
"""

from __future__ import annotations

import logging
from typing import Final

from ..llm.decode import Ok, decode_plan
from .errors import FailureKind, PlanGenerationError, TransportFailure
from .models import PlannerResult
from .ports import LLMClient, ResponseSchema
from .state import AppState

logger = logging.getLogger(__name__)

NOTES_HEADER: Final[str] = "Kullanıcı Notları:"

PLAN_SCHEMA: Final[ResponseSchema] = {
    "name": "daily_plan",
    "schema": {
        "type": "object",
        "properties": {
            "schedule": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "time": {"type": "string", "description": "Saat (Örn: 09:00 - 10:00)"},
                        "activity": {"type": "string", "description": "Aktivite başlığı"},
                        "description": {"type": "string", "description": "Kısa açıklama"},
                    },
                    "required": ["time", "activity"],
                },
            },
            "tips": {"type": "array", "items": {"type": "string"}},
        },
        "required": ["schedule", "tips"],
    },
}


def build_plan_prompt(notes: str) -> str:
    return (
        "Aşağıdaki notlara ve yapılacaklara dayanarak verimli bir günlük program oluştur. "
        "Ayrıca gün için 2-3 motivasyon veya verimlilik ipucu ekle.\n\n"
        f"{NOTES_HEADER}\n{notes}"
    )


async def generate_daily_plan(llm: LLMClient, notes: str) -> PlannerResult:
    """
    Turn unstructured notes into a PlannerResult.

    Raises PlanGenerationError on transport failure, schema violation or empty body.
    """
    try:
        payload = await llm.complete(
            [{"role": "user", "content": build_plan_prompt(notes)}],
            response_schema=PLAN_SCHEMA,
        )
    except TransportFailure as e:
        logger.info("Plan generation failed (%s): %s", e.kind, e)
        raise PlanGenerationError(kind=e.kind) from e
    except Exception as e:
        logger.exception("Plan generation crashed.")
        raise PlanGenerationError(kind=FailureKind.TRANSPORT) from e

    result = decode_plan(payload)
    if not isinstance(result, Ok):
        logger.info("Plan generation unusable (%s): %s", result.kind, result.reason)
        raise PlanGenerationError(kind=result.kind)

    plan = result.value
    logger.debug("Plan generated: %d slots, %d tips", len(plan.schedule), len(plan.tips))
    return plan


async def plan_day(state: AppState, notes: str) -> PlannerResult:
    """Generate a plan and keep it as the current (transient) plan on the state."""
    plan = await generate_daily_plan(state.llm, notes.strip())
    state.last_plan = plan
    return plan
