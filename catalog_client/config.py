# =============================================================================
# catalog_client/config.py - Client Settings
# =============================================================================
# Settings for code that consumes the Superhero Catalog API.
# Loaded from environment variables / .env like the server settings, but
# kept separate so a client never needs Supabase credentials.
# =============================================================================

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Settings for SuperheroApiClient and SuperheroStore."""

    SUPERHERO_API_URL: str = Field(
        default="http://localhost:5501",
        description="Base URL of the Superhero Catalog API"
    )

    SUPERHERO_PAGE_LIMIT: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Records requested per list page"
    )

    SUPERHERO_API_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single API request"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache
def get_client_settings() -> ClientSettings:
    """Get cached ClientSettings instance."""
    return ClientSettings()
