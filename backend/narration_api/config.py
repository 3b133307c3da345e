from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing at startup."""


class Settings(BaseSettings):
    """Application runtime configuration."""

    app_name: str = Field(default="TTS API Pro", alias="APP_NAME")
    gemini_api_key: str | None = Field(default=None, alias="GEMINI_API_KEY")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com", alias="GEMINI_BASE_URL"
    )
    tts_model: str = Field(default="gemini-2.5-pro-preview-tts", alias="TTS_MODEL")
    # long narrations on the Pro model can take minutes
    request_timeout: float = Field(default=300.0, gt=0, alias="TTS_REQUEST_TIMEOUT")
    max_attempts: int = Field(default=2, ge=1, alias="TTS_MAX_ATTEMPTS")
    retry_delay: float = Field(default=1.0, ge=0, alias="TTS_RETRY_DELAY")
    max_body_bytes: int = Field(default=10 * 1024 * 1024, gt=0, alias="MAX_BODY_BYTES")
    allow_origins_raw: str | None = Field(default=None, alias="ALLOW_ORIGINS")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3001, alias="PORT")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", case_sensitive=False)

    @property
    def allow_origins(self) -> List[str]:
        if not self.allow_origins_raw:
            return ["*"]
        return [origin.strip() for origin in self.allow_origins_raw.split(",") if origin.strip()]

    def require_api_key(self) -> str:
        if not self.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY environment variable is required")
        return self.gemini_api_key


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
