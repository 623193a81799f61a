# careerpath/config.py
# Environment-driven settings (with .env support) and logging setup.

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Ensure environment variables from .env are loaded
load_dotenv()

_TRUTHY = {"1", "true", "yes", "y", "on"}


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name)
    if raw is None:
        return default
    return raw.lower() in _TRUTHY


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    use_real_ai: bool = False
    ai_provider: str = "openai"
    ai_model: str = "gpt-4o-mini"
    openai_api_key: Optional[str] = None
    ai_timeout_s: float = 30.0
    use_real_jobs: bool = False
    adzuna_app_id: Optional[str] = None
    adzuna_api_key: Optional[str] = None
    adzuna_country: str = "us"
    adzuna_timeout_s: float = 10.0
    log_level: str = "INFO"

    @property
    def job_search_enabled(self) -> bool:
        return self.use_real_jobs and bool(self.adzuna_app_id) and bool(self.adzuna_api_key)


def load_settings() -> Settings:
    """Read settings from the process environment on every call."""
    return Settings(
        use_real_ai=_get_env_bool("USE_REAL_AI", False),
        ai_provider=(_get_env("AI_PROVIDER", "openai") or "openai").lower(),
        ai_model=_get_env("AI_MODEL", "gpt-4o-mini") or "gpt-4o-mini",
        openai_api_key=_get_env("OPENAI_API_KEY"),
        ai_timeout_s=_get_env_float("AI_TIMEOUT_S", 30.0),
        use_real_jobs=_get_env_bool("USE_REAL_JOBS", False),
        adzuna_app_id=_get_env("ADZUNA_APP_ID"),
        adzuna_api_key=_get_env("ADZUNA_API_KEY"),
        adzuna_country=(_get_env("ADZUNA_COUNTRY", "us") or "us").lower(),
        adzuna_timeout_s=_get_env_float("ADZUNA_TIMEOUT_S", 10.0),
        log_level=(_get_env("LOG_LEVEL", "INFO") or "INFO").upper(),
    )


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=level or load_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
