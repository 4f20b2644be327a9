# tests/test_llm_client.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import Any

import httpx
import openai
import pytest

from turan_assistant.config import Settings
from turan_assistant.core.errors import FailureKind, TransportFailure
from turan_assistant.core.planner import PLAN_SCHEMA
from turan_assistant.llm.client import (
    WEB_SEARCH_PLUGIN,
    OpenRouterLLMClient,
    friendly_llm_error_message,
    to_transport_failure,
)

_REQUEST = httpx.Request("POST", "http://llm.test/v1/chat/completions")


def _settings(**overrides: Any) -> Settings:
    base: dict[str, Any] = dict(
        app_name="TURAN",
        log_level="INFO",
        api_key="sk-test",
        base_url="http://llm.test/v1",
        model="google/gemini-2.5-flash",
        web_search=True,
        request_timeout=None,
        extra_headers={"X-Title": "TURAN"},
        data_dir=Path(".local/turan"),
        tasks_path=Path(".local/turan/asistan_tasks.json"),
    )
    base.update(overrides)
    return Settings(**base)


class _Dumpable:
    def __init__(self, data: dict[str, Any]) -> None:
        self._data = data

    def model_dump(self) -> dict[str, Any]:
        return self._data


class FakeCompletions:
    def __init__(self, response: Any = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.requests: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def _client(completions: FakeCompletions) -> OpenRouterLLMClient:
    fake_sdk = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return OpenRouterLLMClient(_settings(), client=fake_sdk)  # type: ignore[arg-type]


def test_missing_api_key_is_a_configuration_error() -> None:
    with pytest.raises(RuntimeError) as ei:
        OpenRouterLLMClient(_settings(api_key=None))
    assert "TURAN_API_KEY" in friendly_llm_error_message(ei.value)


@pytest.mark.asyncio
async def test_chat_request_shape_with_web_search() -> None:
    payload = {"choices": [{"message": {"role": "assistant", "content": "hi"}}]}
    completions = FakeCompletions(_Dumpable(payload))

    out = await _client(completions).complete(
        [{"role": "user", "content": "selam"}],
        system_prompt="persona",
        web_search=True,
    )

    assert out == payload
    req = completions.requests[0]
    assert req["model"] == "google/gemini-2.5-flash"
    assert req["messages"] == [
        {"role": "system", "content": "persona"},
        {"role": "user", "content": "selam"},
    ]
    assert req["extra_body"] == {"plugins": [WEB_SEARCH_PLUGIN]}
    assert req["extra_headers"] == {"X-Title": "TURAN"}
    assert "response_format" not in req


@pytest.mark.asyncio
async def test_structured_request_uses_json_schema() -> None:
    completions = FakeCompletions({"choices": []})

    await _client(completions).complete(
        [{"role": "user", "content": "notlar"}],
        response_schema=PLAN_SCHEMA,
    )

    req = completions.requests[0]
    assert req["response_format"]["type"] == "json_schema"
    assert req["response_format"]["json_schema"]["name"] == "daily_plan"
    assert req["response_format"]["json_schema"]["schema"] == PLAN_SCHEMA["schema"]
    assert "extra_body" not in req
    assert req["messages"] == [{"role": "user", "content": "notlar"}]


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (openai.APIConnectionError(request=_REQUEST), None),
        (openai.APITimeoutError(request=_REQUEST), None),
        (
            openai.RateLimitError("slow down", response=httpx.Response(429, request=_REQUEST), body=None),
            429,
        ),
        (
            openai.AuthenticationError("bad key", response=httpx.Response(401, request=_REQUEST), body=None),
            401,
        ),
        (
            openai.InternalServerError("oops", response=httpx.Response(500, request=_REQUEST), body=None),
            500,
        ),
    ],
)
@pytest.mark.asyncio
async def test_sdk_errors_become_transport_failures(error: Exception, status: int | None) -> None:
    completions = FakeCompletions(error=error)

    with pytest.raises(TransportFailure) as ei:
        await _client(completions).complete([{"role": "user", "content": "x"}])

    assert ei.value.kind == FailureKind.TRANSPORT
    assert ei.value.status_code == status
    assert ei.value.__cause__ is error
    # No automatic retry.
    assert len(completions.requests) == 1


def test_transport_failure_messages() -> None:
    auth = openai.AuthenticationError("bad", response=httpx.Response(401, request=_REQUEST), body=None)
    assert "authentication" in str(to_transport_failure(auth))
    assert "network" in str(to_transport_failure(httpx.ConnectError("refused")))


@pytest.mark.asyncio
async def test_unexpected_response_type_is_a_transport_failure() -> None:
    completions = FakeCompletions(response=object())

    with pytest.raises(TransportFailure):
        await _client(completions).complete([{"role": "user", "content": "x"}])
