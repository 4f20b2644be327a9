# src/turan_assistant/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (the backend checks the key lazily).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

ENV_PREFIX = "TURAN"

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "google/gemini-2.5-flash"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv() -> None:
    load_dotenv(override=False)


_load_dotenv()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float | None) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- LLM backend (OpenAI-compatible) ----
    api_key: Optional[str]
    base_url: str
    model: str
    web_search: bool
    request_timeout: Optional[float]
    extra_headers: Dict[str, str]

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_path: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _first_env(_k("APP_NAME"), default="TURAN") or "TURAN"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        api_key = _first_env(_k("API_KEY"), "OPENROUTER_API_KEY", "API_KEY", default=None)
        base_url = _env(_k("BASE_URL"), DEFAULT_BASE_URL)
        model = (_env(_k("MODEL"), DEFAULT_MODEL) or DEFAULT_MODEL).strip()
        web_search = _env_bool(_k("WEB_SEARCH"), True)
        request_timeout = _env_float(_k("LLM_TIMEOUT_SECONDS"), None)

        # Attribution headers understood by OpenRouter; harmless elsewhere.
        extra_headers = {
            "HTTP-Referer": _env(_k("HTTP_REFERER"), "https://example.com"),
            "X-Title": _env(_k("APP_TITLE"), app_name),
        }

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/turan"))
        tasks_path = _env_path(_k("TASKS_PATH"), data_dir / "asistan_tasks.json")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            api_key=api_key,
            base_url=base_url,
            model=model,
            web_search=web_search,
            request_timeout=request_timeout,
            extra_headers=extra_headers,
            data_dir=data_dir,
            tasks_path=tasks_path,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
