from functools import lru_cache
from typing import Any, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_parse_none_str="none",
    )

    # Database
    DATABASE_URL: str = "postgresql+asyncpg://postgres:postgres@db:5432/devcamper"

    # API
    API_TITLE: str = "DevCamper API"
    API_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "info"

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Environment
    ENV: str = "development"

    # Geocoder (MapQuest)
    GEOCODER_API_KEY: Optional[str] = None
    GEOCODER_BASE_URL: str = "https://www.mapquestapi.com/geocoding/v1"
    GEOCODER_TIMEOUT: float = 10.0
    GEOCODER_MAX_RETRIES: int = 3

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        elif isinstance(v, list):
            return v
        return []


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
