import math
from functools import lru_cache
from typing import Dict, List

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from relay.errors import StartupMisconfiguration

# ─── Free OpenRouter models ─────────────────────────────
DEFAULT_MODELS: Dict[str, str] = {
    "deepseek-chat": "deepseek/deepseek-chat",
    "qwen2.5-7b": "qwen/qwen2.5-7b-instruct",
    "qwen2.5-14b": "qwen/qwen2.5-14b-instruct",
    "llama3.2-3b": "meta-llama/llama-3.2-3b-instruct",
    "llama3.1-8b": "meta-llama/llama-3.1-8b-instruct",
    "gemma2-9b": "google/gemma-2-9b-it",
    "phi3.5": "microsoft/phi-3.5-mini-instruct",
    "mistral-nemo": "mistralai/mistral-nemo-instruct",
    "nemotron-mini": "nvidia/nemotron-mini-4b-instruct",
}

# Tried in this order when the requested model fails
DEFAULT_FALLBACK_ORDER: List[str] = [
    "deepseek-chat",
    "llama3.1-8b",
    "gemma2-9b",
    "qwen2.5-7b",
    "phi3.5",
]


LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    OPENROUTER_API_KEY: str = Field(..., min_length=1)
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"

    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Bound on a single upstream attempt (seconds)
    UPSTREAM_TIMEOUT_SECONDS: float = Field(20.0, gt=0)
    MAX_MESSAGE_LENGTH: int = Field(10000, gt=0)

    # Treat a 2xx reply without choices[0].message.content as a failed attempt
    STRICT_REPLY_SHAPE: bool = False

    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    MODELS: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_MODELS))
    FALLBACK_ORDER: List[str] = Field(default_factory=lambda: list(DEFAULT_FALLBACK_ORDER))

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("UPSTREAM_TIMEOUT_SECONDS")
    @classmethod
    def _finite_timeout(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("UPSTREAM_TIMEOUT_SECONDS must be finite")
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return level

    @model_validator(mode="after")
    def _fallbacks_registered(self) -> "Settings":
        missing = [key for key in self.FALLBACK_ORDER if key not in self.MODELS]
        if missing:
            raise ValueError(f"FALLBACK_ORDER references unknown models: {', '.join(missing)}")
        return self


def load_settings(**overrides) -> Settings:
    """
    Build settings from the environment, turning any validation problem
    into a StartupMisconfiguration. The message names the offending fields
    only, never their values.
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) or "settings" for err in e.errors()})
        raise StartupMisconfiguration(
            f"Invalid configuration: {', '.join(fields)}"
        ) from e


@lru_cache
def get_settings() -> Settings:
    return load_settings()
