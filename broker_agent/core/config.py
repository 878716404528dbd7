"""Application configuration using Pydantic settings."""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMConfig(BaseModel):
    """Language model access.

    Env-overridable via LLM__KEY, e.g. LLM__API_KEY=... or LLM__TIMEOUT_SECONDS=20
    """

    api_key: str = ""
    # LiteLLM routes "gemini/<model>" to Google AI Studio
    model_prefix: str = "gemini/"
    default_model: str = "gemini-2.5-flash"
    fallback_models: list[str] = Field(default_factory=list)
    default_temperature: float = 0.7
    timeout_seconds: float = 30.0
    max_attempts: int = 2


class ListingsConfig(BaseModel):
    """Property search provider (Tokko Broker API)."""

    base_url: str = "https://www.tokkobroker.com/api/v1"
    language: str = "es"
    page_size: int = 10
    timeout_seconds: float = 10.0


class CRMConfig(BaseModel):
    """CRM conversation history provider (LeadConnector / GoHighLevel API)."""

    base_url: str = "https://services.leadconnectorhq.com"
    api_version: str = "2021-07-28"
    history_limit: int = 5
    timeout_seconds: float = 10.0


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    # Application
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = False
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    # Integrations
    llm: LLMConfig = Field(default_factory=LLMConfig)
    listings: ListingsConfig = Field(default_factory=ListingsConfig)
    crm: CRMConfig = Field(default_factory=CRMConfig)

    # Scheduling links are derived locally, no external call
    scheduling_base_url: str = "https://calendly.com"

    # Sessions
    max_live_sessions: int = 500

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
