"""Application settings via pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables (no prefix)."""

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Core ---
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    log_level: str = "INFO"
    log_format: str = "json"
    request_timeout_seconds: float = 30.0

    # --- Database pool ---
    database_url: str
    db_max_connections: int = Field(default=20, ge=1)
    db_min_connections: int = Field(default=2, ge=0)
    db_idle_timeout: int = 300  # seconds
    db_max_lifetime: int = 1800  # seconds
    db_connect_timeout: float = 5.0

    # --- JWT ---
    jwt_secret: str = Field(default="change-me-in-production-this-is-32+chars", min_length=32)
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440
    jwt_issuer: str = "poketactix"

    # --- Pokemon catalog ---
    pokeapi_base_url: str = "https://pokeapi.co/api/v2"
    pokeapi_timeout_seconds: float = 5.0
    pokeapi_max_moves: int = 4

    # --- Profile ---
    history_default_limit: int = 20
    history_max_limit: int = 100


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()  # type: ignore[call-arg]
