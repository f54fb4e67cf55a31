# order_assistant/config.py
from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel

# Load .env locally (safe in prod too)
load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, str(default))
    try:
        return float(raw)
    except ValueError:
        return default


# -------------------
# Config (env-driven)
# -------------------
class Settings(BaseModel):
    anthropic_api_key: str = os.getenv("ANTHROPIC_API_KEY", "").strip()
    anthropic_model: str = os.getenv("ANTHROPIC_MODEL", "claude-3-sonnet-20240229").strip()
    anthropic_base_url: str = os.getenv("ANTHROPIC_BASE_URL", "https://api.anthropic.com").rstrip("/")
    anthropic_version: str = "2023-06-01"

    generation_max_tokens: int = _env_int("GENERATION_MAX_TOKENS", 4000)
    # The generator has no timeout of its own; expiry is a transport error.
    generation_timeout_seconds: float = _env_float("GENERATION_TIMEOUT_SECONDS", 30.0)

    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
    jwt_algorithm: str = os.getenv("JWT_ALG", "HS256")
    jwt_expire_minutes: int = _env_int("JWT_EXPIRE_MIN", 1440)

    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./order_assistant.db")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").strip().upper()

    @property
    def generation_enabled(self) -> bool:
        return bool(self.anthropic_api_key)


settings = Settings()


def get_settings() -> Settings:
    return settings
