"""Configuration management using pydantic-settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_default_catalog_path() -> Path:
    """Get default path to the card catalog database."""
    return Path.home() / ".card-search" / "catalog.sqlite"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    catalog_db_path: Path = Field(
        default_factory=_get_default_catalog_path,
        description="Path to the card catalog database (catalog.sqlite)",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    # Query performance logging
    log_slow_queries: bool = Field(
        default=False,
        description="Enable logging of slow database queries",
    )
    slow_query_threshold_ms: int = Field(
        default=100,
        description="Threshold in milliseconds for slow query warnings",
    )

    # Connection pooling
    db_max_connections: int = Field(
        default=5,
        description="Maximum concurrent database operations (semaphore limit)",
    )

    # Lookup caches (one per entity type, entries live for the process lifetime)
    player_cache_size: int = Field(default=500, description="Cached player lookups")
    series_cache_size: int = Field(default=200, description="Cached set/series lookups")
    team_cache_size: int = Field(default=50, description="Cached team lookups")
    color_cache_size: int = Field(default=100, description="Cached color lookups")

    # Search behaviour
    default_limit: int = Field(
        default=50,
        description="Default maximum number of results per search",
    )
    ngram_single_word_max_words: int = Field(
        default=2,
        description="Allow 1-word n-grams only when the cleaned query has at most this many words",
    )
    player_ngram_min_chars: int = Field(
        default=2,
        description="Shortest n-gram (in characters) looked up as a player name",
    )
    team_ngram_min_chars: int = Field(
        default=2,
        description="Shortest n-gram (in characters) looked up as a team name",
    )
    set_ngram_min_chars: int = Field(
        default=3,
        description="Shortest n-gram (in characters) looked up as a set name",
    )
    phonetic_matching: bool = Field(
        default=True,
        description="Fall back to Soundex player lookups when nothing else was recognized",
    )


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get application settings (cached singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
