# src/turan_assistant/llm/decode.py

"""
Decode-and-validate step for raw completion payloads.

The backend hands back untyped JSON-like data. Nothing here assumes its shape:
every decoder returns a tagged result

    Ok(value) | SchemaViolation(reason) | EmptyResponse(reason)

and the adapters decide what a non-Ok result means for their operation.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from ..core.errors import FailureKind
from ..core.models import PlannerResult, ScheduleItem, Source

T = TypeVar("T")

DEFAULT_SOURCE_TITLE = "Kaynak"

_FENCE_RE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n?(.*?)\n?```$", re.DOTALL)


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class SchemaViolation:
    reason: str
    kind: ClassVar[FailureKind] = FailureKind.SCHEMA_VIOLATION


@dataclass(frozen=True, slots=True)
class EmptyResponse:
    reason: str = "empty payload"
    kind: ClassVar[FailureKind] = FailureKind.EMPTY_RESPONSE


DecodeResult = Ok[T] | SchemaViolation | EmptyResponse


# ---- payload navigation ----


def _first_choice(payload: Any) -> dict[str, Any] | None:
    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    choice0 = choices[0]
    return choice0 if isinstance(choice0, dict) else None


def _message(payload: Any) -> dict[str, Any] | None:
    choice0 = _first_choice(payload)
    if choice0 is None:
        return None
    msg = choice0.get("message")
    return msg if isinstance(msg, dict) else None


def message_text(payload: Any) -> str:
    """Assistant text of the first choice ("" when absent)."""
    msg = _message(payload)
    if msg is None:
        return ""

    content = msg.get("content")
    if isinstance(content, str):
        return content.strip()

    # Some gateways return content parts: [{"type": "text", "text": "..."}].
    if isinstance(content, list):
        parts = [str(p.get("text") or "") for p in content if isinstance(p, dict)]
        return "".join(parts).strip()

    return ""


def _strip_code_fence(raw: str) -> str:
    m = _FENCE_RE.match(raw.strip())
    return m.group(1).strip() if m else raw.strip()


def _structured_json(payload: Any) -> DecodeResult[Any]:
    """Common first step of structured decoders: payload -> parsed JSON value."""
    if not isinstance(payload, dict):
        return SchemaViolation(f"payload is {type(payload).__name__}, expected object")

    text = message_text(payload)
    if not text:
        return EmptyResponse("no message content")

    try:
        return Ok(json.loads(_strip_code_fence(text)))
    except ValueError as e:
        return SchemaViolation(f"content is not JSON: {e}")


# ---- sources ----


def _grounding_metadata(*containers: Any) -> dict[str, Any] | None:
    for c in containers:
        if not isinstance(c, dict):
            continue
        for key in ("grounding_metadata", "groundingMetadata"):
            gm = c.get(key)
            if isinstance(gm, dict):
                return gm
    return None


def extract_sources(payload: Any) -> tuple[Source, ...]:
    """
    Collect web citations of the reply, in backend order.

    Understands two shapes:
    - OpenAI-style message annotations: {"type": "url_citation", "url_citation": {"url", "title"}}
    - Gemini-style grounding chunks: {"groundingChunks": [{"web": {"uri", "title"}}]}

    A missing title falls back to DEFAULT_SOURCE_TITLE; entries without a URI are dropped.
    """
    out: list[Source] = []

    msg = _message(payload)
    if msg is not None:
        for ann in msg.get("annotations") or []:
            if not isinstance(ann, dict) or ann.get("type") != "url_citation":
                continue
            cit = ann.get("url_citation")
            if not isinstance(cit, dict):
                continue
            uri = str(cit.get("url") or "").strip()
            if uri:
                out.append(Source(title=str(cit.get("title") or DEFAULT_SOURCE_TITLE), uri=uri))

    gm = _grounding_metadata(_first_choice(payload), msg, payload)
    if gm is not None:
        chunks = gm.get("grounding_chunks") or gm.get("groundingChunks") or []
        for chunk in chunks if isinstance(chunks, list) else []:
            web = chunk.get("web") if isinstance(chunk, dict) else None
            if not isinstance(web, dict):
                continue
            uri = str(web.get("uri") or "").strip()
            if uri:
                out.append(Source(title=str(web.get("title") or DEFAULT_SOURCE_TITLE), uri=uri))

    return tuple(out)


# ---- decoders ----


def decode_text(payload: Any) -> DecodeResult[str]:
    if not isinstance(payload, dict):
        return SchemaViolation(f"payload is {type(payload).__name__}, expected object")
    text = message_text(payload)
    if not text:
        return EmptyResponse("no message content")
    return Ok(text)


def decode_steps(payload: Any) -> DecodeResult[list[str]]:
    """
    Decode a task breakdown: {"steps": [str, ...]} or a bare [str, ...].
    Order is preserved; items are only whitespace-trimmed. A blank or
    non-string item makes the whole result a schema violation.
    """
    parsed = _structured_json(payload)
    if not isinstance(parsed, Ok):
        return parsed

    value = parsed.value
    if isinstance(value, dict):
        value = value.get("steps")
    if not isinstance(value, list):
        return SchemaViolation("steps is not an array")

    steps: list[str] = []
    for i, item in enumerate(value):
        if not isinstance(item, str) or not item.strip():
            return SchemaViolation(f"step {i} is not a non-empty string")
        steps.append(item.strip())

    if not steps:
        return EmptyResponse("no steps")
    return Ok(steps)


def _decode_schedule_item(i: int, raw: Any) -> ScheduleItem | SchemaViolation:
    if not isinstance(raw, dict):
        return SchemaViolation(f"schedule[{i}] is not an object")

    time_label = raw.get("time")
    activity = raw.get("activity")
    if not isinstance(time_label, str) or not isinstance(activity, str):
        return SchemaViolation(f"schedule[{i}] lacks string time/activity")

    description = raw.get("description")
    if description is not None and not isinstance(description, str):
        return SchemaViolation(f"schedule[{i}].description is not a string")

    return ScheduleItem(time=time_label, activity=activity, description=description or None)


def decode_plan(payload: Any) -> DecodeResult[PlannerResult]:
    """Decode {"schedule": [...], "tips": [...]}; both keys are required."""
    parsed = _structured_json(payload)
    if not isinstance(parsed, Ok):
        return parsed

    value = parsed.value
    if not isinstance(value, dict):
        return SchemaViolation("plan is not an object")

    schedule_raw = value.get("schedule")
    tips_raw = value.get("tips")
    if not isinstance(schedule_raw, list) or not isinstance(tips_raw, list):
        return SchemaViolation("plan lacks schedule/tips arrays")

    schedule: list[ScheduleItem] = []
    for i, raw in enumerate(schedule_raw):
        item = _decode_schedule_item(i, raw)
        if isinstance(item, SchemaViolation):
            return item
        schedule.append(item)

    if not all(isinstance(t, str) for t in tips_raw):
        return SchemaViolation("tips must be strings")

    return Ok(PlannerResult(schedule=tuple(schedule), tips=tuple(tips_raw)))
