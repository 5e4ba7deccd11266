from __future__ import annotations

import os
from dataclasses import dataclass


def _getenv(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name)
    if v is None:
        return default
    v = v.strip()
    return v if v else default


@dataclass(frozen=True)
class Settings:
    mongo_uri: str
    mongo_db: str
    cors_origins: list[str]
    openrouter_api_key: str | None
    openrouter_base_url: str
    openrouter_model: str
    openai_api_key: str | None
    openai_base_url: str
    openai_model: str
    sentiment_model_name: str = "default"
    llm_timeout: float = 30.0
    log_level: str = "INFO"


def load_settings() -> Settings:
    mongo_uri = _getenv("MONGO_URI", "mongodb://localhost:27017") or "mongodb://localhost:27017"
    mongo_db = _getenv("MONGO_DB", "voice_assistant") or "voice_assistant"

    cors_raw = _getenv("CORS_ORIGINS", "http://localhost:5173") or "http://localhost:5173"
    cors_origins = [o.strip() for o in cors_raw.split(",") if o.strip()]

    openrouter_api_key = _getenv("OPENROUTER_API_KEY")
    openrouter_base_url = _getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1") or "https://openrouter.ai/api/v1"
    openrouter_model = _getenv("OPENROUTER_MODEL", "openai/gpt-4o-mini") or "openai/gpt-4o-mini"

    openai_api_key = _getenv("OPENAI_API_KEY")
    openai_base_url = _getenv("OPENAI_BASE_URL", "https://api.openai.com/v1") or "https://api.openai.com/v1"
    openai_model = _getenv("OPENAI_MODEL", "gpt-4o-mini") or "gpt-4o-mini"

    timeout_raw = _getenv("LLM_TIMEOUT", "30") or "30"

    return Settings(
        mongo_uri=mongo_uri,
        mongo_db=mongo_db,
        cors_origins=cors_origins,
        openrouter_api_key=openrouter_api_key,
        openrouter_base_url=openrouter_base_url,
        openrouter_model=openrouter_model,
        openai_api_key=openai_api_key,
        openai_base_url=openai_base_url,
        openai_model=openai_model,
        sentiment_model_name=_getenv("SENTIMENT_MODEL_NAME", "default") or "default",
        llm_timeout=float(timeout_raw),
        log_level=(_getenv("LOG_LEVEL", "INFO") or "INFO").upper(),
    )
