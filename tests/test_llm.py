# tests/test_llm.py
# AI caller construction and the exception-free call wrapper.

import asyncio

import pytest

from careerpath.config import Settings
from careerpath.llm import OpenAICaller, get_ai_caller, request_completion


class _Caller:
    def __init__(self, reply=None, exc=None, delay=0.0):
        self.reply, self.exc, self.delay = reply, exc, delay

    async def call(self, prompt: str) -> str:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc:
            raise self.exc
        return self.reply


def test_request_completion_success():
    res = asyncio.run(request_completion(_Caller(reply='{"a": 1}'), "p", timeout_s=1))
    assert res.ok and res.text == '{"a": 1}' and res.error is None


def test_request_completion_failure_is_captured():
    res = asyncio.run(request_completion(_Caller(exc=RuntimeError("boom")), "p", timeout_s=1))
    assert not res.ok
    assert res.text is None
    assert "boom" in res.error


def test_request_completion_timeout():
    res = asyncio.run(request_completion(_Caller(reply="late", delay=1.0), "p", timeout_s=0.01))
    assert not res.ok
    assert "timed out" in res.error


def test_request_completion_non_text_reply():
    res = asyncio.run(request_completion(_Caller(reply=None), "p", timeout_s=1))
    assert not res.ok


def test_get_ai_caller_disabled():
    assert get_ai_caller(Settings(use_real_ai=False, openai_api_key="sk-test")) is None


def test_get_ai_caller_without_key():
    assert get_ai_caller(Settings(use_real_ai=True, openai_api_key=None)) is None


def test_get_ai_caller_unsupported_provider():
    with pytest.raises(ValueError):
        get_ai_caller(Settings(use_real_ai=True, ai_provider="gemini", openai_api_key="sk-test"))


def test_get_ai_caller_openai():
    caller = get_ai_caller(Settings(use_real_ai=True, openai_api_key="sk-test-dummy"))
    assert isinstance(caller, OpenAICaller)


def test_get_ai_caller_reads_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("USE_REAL_AI", "true")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-dummy")
    monkeypatch.setenv("AI_PROVIDER", "openai")
    assert isinstance(get_ai_caller(), OpenAICaller)


def test_get_ai_caller_reuses_one_client_per_configuration():
    settings = Settings(use_real_ai=True, openai_api_key="sk-test-dummy")

    first = get_ai_caller(settings)
    second = get_ai_caller(Settings(use_real_ai=True, openai_api_key="sk-test-dummy"))
    other = get_ai_caller(Settings(use_real_ai=True, openai_api_key="sk-test-other"))

    assert first is second
    assert first._client is second._client
    assert other is not first
