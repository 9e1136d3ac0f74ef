"""Application configuration."""

import os

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from nutrimate.services.safety import BrandMatching

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = "low"
    openai_store: bool = False
    advice_hysteresis_kcal: float = 50.0
    default_timezone: str = "UTC"
    brand_matching: BrandMatching = BrandMatching.STANDARD
    goal_cache_ttl_seconds: int = 86400
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @field_validator("brand_matching", mode="before")
    @classmethod
    def _parse_brand_matching(cls, value: object) -> object:
        if isinstance(value, str):
            return parse_brand_matching(value)
        return value


def parse_brand_matching(raw: str | None) -> BrandMatching:
    """Parse the brand matching mode, defaulting to the standard rule."""
    if raw is None:
        return BrandMatching.STANDARD
    cleaned = raw.strip().lower().replace("-", "_")
    if not cleaned:
        return BrandMatching.STANDARD
    return BrandMatching(cleaned)
