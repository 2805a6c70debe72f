"""Application configuration and environment settings"""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Ingestion defaults
MIN_LISTEN_LENGTH_MS = 10000
DEFAULT_SKIP_PERCENT = 0.10

class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    # Storage
    DB_PATH: str = Field("listening_stats.db", description="SQLite database file (or ':memory:')")
    LISTENS_STREAM: str = Field("listens", description="Name of the event stream holding track plays")
    SNAPSHOT_BUFFER_COUNT: int = Field(1000, description="Projected events between listen tracker snapshots")

    # Ingestion
    MIN_LISTEN_LENGTH_MS: int = Field(MIN_LISTEN_LENGTH_MS, description="Plays shorter than this count as skips")
    SKIP_PERCENT_THRESHOLD: float = Field(DEFAULT_SKIP_PERCENT, description="Played share of a track below which it counts as skipped")

    # Reporting
    GENERAL_STATS_COUNT: int = Field(25, description="Number of entries in each general stats ranking")
    LOG_LEVEL: str = Field("INFO", description="Root log level for the command line entry point")

    # Input/Output directories with defaults
    HISTORY_DIR: str = Field("./history", description="Directory containing exported listening history files")
    OUTPUT_DIR: str = Field("./output", description="Directory for generated reports")

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra='ignore'
    )

settings = Settings()

# Constants
LISTEN_TRACKER_SNAPSHOT = "listen_tracker"
