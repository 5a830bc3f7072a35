"""Configuration settings for the SKCS predictions service."""
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server
    host: str = "0.0.0.0"
    port: int = 5000
    service_name: str = "skcs-predictions"

    # Logging
    log_level: str = "INFO"
    json_logs: bool = True

    # Explicit allow-list, never "*"
    cors_origins: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
        ]
    )

    # Advisory API-Sports lookup; skipped when no key is configured
    apisports_key: Optional[str] = None
    apisports_base_url: str = "https://v3.football.api-sports.io"
    apisports_league_id: int = 39
    apisports_season: int = 2025
    odds_lookup_timeout: float = Field(default=3.0, gt=0)

    class Config:
        env_file = ".env"
        case_sensitive = False

    @field_validator("cors_origins")
    @classmethod
    def reject_wildcard(cls, value: List[str]) -> List[str]:
        if "*" in value:
            raise ValueError("CORS_ORIGINS must list explicit origins")
        return value

    @property
    def odds_lookup_enabled(self) -> bool:
        return bool(self.apisports_key and self.apisports_key.strip())


# Global settings instance
settings = Settings()
