# src/turan_assistant/llm/client.py

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
import openai
from openai import AsyncOpenAI

from ..config import Settings, get_settings
from ..core.errors import TransportFailure
from ..core.ports import LLMMessage, ResponseSchema

logger = logging.getLogger(__name__)

# OpenRouter web-search plugin; attaches url_citation annotations to the reply.
WEB_SEARCH_PLUGIN: dict[str, Any] = {"id": "web"}


def _is_auth_error(exc: Exception) -> bool:
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return True
    return exc.__class__.__name__ in {"UnauthorizedError"}


def _is_rate_limit_error(exc: Exception) -> bool:
    if isinstance(exc, openai.RateLimitError):
        return True
    return exc.__class__.__name__ in {"TooManyRequestsError"}


def _is_connection_error(exc: Exception) -> bool:
    return isinstance(exc, (openai.APIConnectionError, httpx.TransportError))


def _status_code(exc: Exception) -> int | None:
    code = getattr(exc, "status_code", None)
    return code if isinstance(code, int) else None


def to_transport_failure(exc: Exception) -> TransportFailure:
    """Collapse SDK/network exceptions into the single backend failure kind."""
    if _is_auth_error(exc):
        msg = "LLM authentication failed. Check your API key (TURAN_API_KEY)."
    elif _is_rate_limit_error(exc):
        msg = "LLM is rate-limited. Try again later."
    elif _is_connection_error(exc):
        msg = "LLM network/timeout error. Try again later."
    elif _status_code(exc) is not None:
        msg = f"LLM backend returned HTTP {_status_code(exc)}."
    else:
        msg = f"LLM request failed ({exc.__class__.__name__})."
    return TransportFailure(msg, status_code=_status_code(exc))


def friendly_llm_error_message(err: Exception) -> str:
    msg = str(err).strip() or "LLM error."
    if "LLM API key is not set" in msg:
        return "LLM is not configured (missing API key). Set TURAN_API_KEY in .env (see .env.example)."
    if "LLM base URL is not set" in msg:
        return "LLM is not configured (missing base URL). Set TURAN_BASE_URL in .env (see .env.example)."
    return msg


def _to_payload(response: Any) -> dict[str, Any]:
    """
    Turn an SDK response object into plain JSON-like data.

    The SDK models keep unknown fields (e.g. grounding metadata of some gateways),
    so model_dump() preserves them for the decoder.
    """
    if isinstance(response, dict):
        return response
    dump = getattr(response, "model_dump", None)
    if callable(dump):
        data = dump()
        if isinstance(data, dict):
            return data
    raise TransportFailure(f"Unexpected LLM response type: {type(response).__name__}")


class OpenRouterLLMClient:
    """
    Async one-shot chat completion client for OpenAI-compatible backends.

    IMPORTANT:
    - No secrets required at import time; the key is checked on construction.
    - SDK retries are disabled: a failed request surfaces immediately.
    """

    def __init__(self, settings: Settings | None = None, *, client: AsyncOpenAI | None = None) -> None:
        settings = settings or get_settings()

        api_key = (settings.api_key or "").strip()
        base_url = (settings.base_url or "").strip()
        if not api_key:
            raise RuntimeError("LLM API key is not set. Set TURAN_API_KEY in your .env.")
        if not base_url:
            raise RuntimeError("LLM base URL is not set. Set TURAN_BASE_URL in your .env.")

        self._model = settings.model
        self._headers: dict[str, str] = dict(settings.extra_headers or {})

        if client is not None:
            self._client = client
            return

        kwargs: dict[str, Any] = {"base_url": base_url, "api_key": api_key, "max_retries": 0}
        if settings.request_timeout is not None:
            kwargs["timeout"] = httpx.Timeout(settings.request_timeout, connect=5.0)
        self._client = AsyncOpenAI(**kwargs)

    @property
    def model(self) -> str:
        return self._model

    async def complete(
        self,
        messages: list[LLMMessage],
        *,
        system_prompt: str | None = None,
        response_schema: ResponseSchema | None = None,
        web_search: bool = False,
    ) -> dict[str, Any]:
        wire: list[dict[str, str]] = []
        if system_prompt:
            wire.append({"role": "system", "content": system_prompt})
        wire.extend(dict(m) for m in messages)

        request: dict[str, Any] = {
            "model": self._model,
            "messages": wire,
            "extra_headers": self._headers or None,
        }
        if response_schema is not None:
            request["response_format"] = {
                "type": "json_schema",
                "json_schema": {
                    "name": response_schema["name"],
                    "schema": response_schema["schema"],
                    # Optional properties (description?) are not expressible in strict mode.
                    "strict": False,
                },
            }
        if web_search:
            request["extra_body"] = {"plugins": [WEB_SEARCH_PLUGIN]}

        logger.info(
            "LLM: request model=%s messages=%d structured=%s web_search=%s",
            self._model,
            len(wire),
            response_schema["name"] if response_schema else None,
            web_search,
        )
        t0 = time.monotonic()

        try:
            response = await self._client.chat.completions.create(**request)
        except (openai.OpenAIError, httpx.HTTPError) as e:
            failure = to_transport_failure(e)
            logger.info("LLM: request failed on model=%s: %s", self._model, failure)
            raise failure from e

        logger.debug("LLM: response from model=%s (%.2fs)", self._model, time.monotonic() - t0)
        return _to_payload(response)
