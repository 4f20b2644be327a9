# src/turan_assistant/core/breakdown.py

from __future__ import annotations

import logging
from typing import Final

from ..llm.decode import Ok, decode_steps
from .errors import TransportFailure
from .ports import LLMClient, ResponseSchema

logger = logging.getLogger(__name__)

FALLBACK_STEPS: Final[tuple[str, ...]] = ("Adımları belirle", "İşe başla", "Tamamla")

BREAKDOWN_SCHEMA: Final[ResponseSchema] = {
    "name": "task_breakdown",
    "schema": {
        "type": "object",
        "properties": {
            "steps": {
                "type": "array",
                "items": {"type": "string"},
                "minItems": 3,
                "maxItems": 5,
            }
        },
        "required": ["steps"],
        "additionalProperties": False,
    },
}


def build_breakdown_prompt(title: str) -> str:
    return (
        f'Şu görevi gerçekleştirmek için 3 ile 5 arasında mantıklı, küçük adıma (alt göreve) böl: "{title}". '
        'Sadece adımları JSON olarak {"steps": [...]} biçiminde döndür.'
    )


async def break_down_task(llm: LLMClient, title: str) -> list[str]:
    """
    Split a task title into 3-5 actionable steps.

    Never raises: on any failure (transport, malformed or empty response) the
    fixed FALLBACK_STEPS are returned instead.
    """
    try:
        payload = await llm.complete(
            [{"role": "user", "content": build_breakdown_prompt(title)}],
            response_schema=BREAKDOWN_SCHEMA,
        )
    except TransportFailure as e:
        logger.info("Task breakdown failed (%s): %s", e.kind, e)
        return list(FALLBACK_STEPS)
    except Exception:
        logger.exception("Task breakdown crashed for title=%r", title)
        return list(FALLBACK_STEPS)

    result = decode_steps(payload)
    if not isinstance(result, Ok):
        logger.info("Task breakdown unusable (%s): %s", result.kind, result.reason)
        return list(FALLBACK_STEPS)

    logger.debug("Task breakdown produced %d steps", len(result.value))
    return result.value
