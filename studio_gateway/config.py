"""Application settings and environment loading utilities."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List, Optional


def _load_dotenv() -> None:
    env_path = Path(".env")
    if not env_path.exists():
        return
    for line in env_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


_load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"Environment variable {name} must be an integer") from exc


def _list_env(name: str, default: str) -> List[str]:
    raw = os.getenv(name) or default
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    """Runtime configuration derived from environment variables.

    ``gateway_api_key`` may be absent; endpoints then answer 503 instead of
    refusing to start.
    """

    gateway_api_key: Optional[str] = None
    gateway_url: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    gateway_timeout_seconds: int = 60
    chat_model: str = "google/gemini-2.5-flash"
    text_model: str = "google/gemini-2.5-flash"
    enhance_model: str = "google/gemini-2.5-pro"
    image_model: str = "google/gemini-2.5-flash-image-preview"
    rate_limit_max_keys: int = 10_000
    max_prompt_length: int = 5000
    max_image_bytes: int = 10 * 1024 * 1024
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @property
    def has_credentials(self) -> bool:
        return bool(self.gateway_api_key)

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            gateway_api_key=os.getenv("AI_GATEWAY_API_KEY") or None,
            gateway_url=os.getenv("AI_GATEWAY_URL") or defaults.gateway_url,
            gateway_timeout_seconds=_int_env(
                "AI_GATEWAY_TIMEOUT_SECONDS", defaults.gateway_timeout_seconds
            ),
            chat_model=os.getenv("AI_CHAT_MODEL") or defaults.chat_model,
            text_model=os.getenv("AI_TEXT_MODEL") or defaults.text_model,
            enhance_model=os.getenv("AI_ENHANCE_MODEL") or defaults.enhance_model,
            image_model=os.getenv("AI_IMAGE_MODEL") or defaults.image_model,
            rate_limit_max_keys=_int_env("RATE_LIMIT_MAX_KEYS", defaults.rate_limit_max_keys),
            max_prompt_length=_int_env("MAX_PROMPT_LENGTH", defaults.max_prompt_length),
            max_image_bytes=_int_env("MAX_IMAGE_BYTES", defaults.max_image_bytes),
            cors_origins=_list_env("CORS_ORIGINS", "*"),
        )


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings.from_env()
