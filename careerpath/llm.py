# careerpath/llm.py
# Async AI caller (OpenAI) plus a result wrapper so callers never see exceptions.

import asyncio
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Protocol

from openai import AsyncOpenAI, OpenAIError

from .config import Settings, load_settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an experienced career counselor for high school students. "
    "Answer with a single JSON object and nothing else."
)


class AICaller(Protocol):
    async def call(self, prompt: str) -> str: ...


@dataclass(frozen=True)
class AICallResult:
    """Either the raw response text or the reason the call failed, never both."""
    text: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None


class OpenAICaller:
    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout_s: float = 30.0, temperature: float = 0.7):
        if not api_key:
            raise RuntimeError("OPENAI_API_KEY is missing")
        self._model = model
        self._temperature = temperature
        # Failures fall back to deterministic insights instead of retrying.
        self._client = AsyncOpenAI(api_key=api_key, timeout=timeout_s, max_retries=0)

    async def call(self, prompt: str) -> str:
        resp = await self._client.chat.completions.create(
            model=self._model,
            temperature=self._temperature,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        )
        return resp.choices[0].message.content or ""


def get_ai_caller(settings: Optional[Settings] = None) -> Optional[AICaller]:
    """
    Build the configured AI caller, or return None when AI is switched off
    or has no credentials. An unknown provider is a configuration bug and raises.
    """
    cfg = settings or load_settings()
    if not cfg.use_real_ai:
        logger.info("AI insights disabled (USE_REAL_AI is off); using fallback insights.")
        return None
    if cfg.ai_provider != "openai":
        raise ValueError(f"Unsupported AI_PROVIDER='{cfg.ai_provider}'")
    if not cfg.openai_api_key:
        logger.info("AI insights unavailable: OPENAI_API_KEY is not set; using fallback insights.")
        return None
    return _openai_caller(cfg.openai_api_key, cfg.ai_model, cfg.ai_timeout_s)


@lru_cache(maxsize=8)
def _openai_caller(api_key: str, model: str, timeout_s: float) -> OpenAICaller:
    # One client (and connection pool) per configuration, shared across batches.
    return OpenAICaller(api_key=api_key, model=model, timeout_s=timeout_s)


async def request_completion(caller: AICaller, prompt: str, timeout_s: float) -> AICallResult:
    """Await one AI call under a timeout and fold every failure into the result."""
    try:
        text = await asyncio.wait_for(caller.call(prompt), timeout=timeout_s)
    except asyncio.TimeoutError:
        return AICallResult(error=f"timed out after {timeout_s:g}s")
    except OpenAIError as exc:
        # Explicit API errors
        return AICallResult(error=f"{type(exc).__name__}: {exc}")
    except Exception as exc:
        return AICallResult(error=f"{type(exc).__name__}: {exc}")
    if not isinstance(text, str):
        return AICallResult(error="AI response was not text")
    return AICallResult(text=text)
