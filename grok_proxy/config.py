from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True
    )

    # Backend signals (presence decides the upstream, see selector.py)
    GROK_MOCK: bool = Field(default=False)
    OPENAI_API_KEY: Optional[str] = None
    RAPIDAPI_URL: Optional[str] = None
    RAPIDAPI_KEY: Optional[str] = None
    RAPIDAPI_HOST: Optional[str] = None
    GROK_API_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GROK_API_KEY", "VITE_GROK_API_KEY"),
    )

    OPENAI_BASE_URL: str = Field(default="https://api.openai.com/v1")
    GROK_BASE_URL: str = Field(default="https://api.x.ai/v1")
    UPSTREAM_TIMEOUT: Optional[float] = None

    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3001)
    CORS_ORIGINS: str = Field(default="*")

    APP_NAME: str = Field(default="Grok AI Proxy")
    APP_ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")


def get_settings() -> Settings:
    """Read settings from the environment (and `.env`)."""
    return Settings()
