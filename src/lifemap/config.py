"""Configuration settings for Lifemap.

Everything lives in a single SQLite database under ``storage_dir``:
events, tag mappings and tag connections, plus JSONL import logs.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LIFEMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage directory (default: .lifemap in current directory)
    storage_dir: Path = Field(default=Path(".lifemap"))

    # Owner id used when the CLI is not told otherwise
    owner: str = "me"

    # LLM settings for the classification oracle
    llm_provider: str = "openai"
    llm_api_key: str = ""
    llm_base_url: str = ""
    llm_model: str = "gpt-4o-mini"

    # Graph construction
    temporal_window_minutes: int = Field(default=30, ge=1)
    node_cap: int = Field(default=300, ge=1)
    min_node_frequency: int = Field(default=5, ge=0)

    # Classification batching (free-tier friendly: ~8.5 requests/minute)
    classify_batch_size: int = Field(default=20, ge=1, le=50)
    classify_batch_delay: float = Field(default=7.0, ge=0)
    rate_limit_delay: float = Field(default=20.0, ge=0)
    rate_limit_retries: int = Field(default=3, ge=0)

    # Storage writes per transaction
    write_batch_size: int = Field(default=500, ge=1, le=500)

    @property
    def db_path(self) -> Path:
        """Path to the SQLite database."""
        return self.storage_dir / "lifemap.db"

    @property
    def db_url(self) -> str:
        """SQLAlchemy URL for the database."""
        return f"sqlite:///{self.db_path}"

    @property
    def logs_dir(self) -> Path:
        """Directory holding JSONL import logs."""
        return self.storage_dir / "logs"

    def ensure_storage_dir(self) -> None:
        """Create storage directory if it doesn't exist."""
        self.storage_dir.mkdir(parents=True, exist_ok=True)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings cache (useful for testing)."""
    global _settings
    _settings = None
