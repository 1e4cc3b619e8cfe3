"""Application settings and configuration."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Return the default data directory."""
    return Path.home() / ".wealthtrack"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="WEALTHTRACK_",
    )

    app_name: str = "WealthTrack"
    app_version: str = "0.1.0"

    # Data directory (database lives here unless database_url is set)
    data_dir: Optional[Path] = None
    database_url: Optional[str] = None

    log_level: str = "INFO"
    timezone: str = "Europe/Rome"

    # Price cache and resolver
    price_cache_ttl_seconds: int = 30 * 60
    fetch_timeout_seconds: float = 10.0
    max_workers: int = 8
    price_retries: int = 2
    retry_backoff_seconds: float = 1.0
    crypto_vs_currency: str = "eur"
    # Offline mode: deterministic stub prices instead of CoinGecko/Yahoo
    use_stub_provider: bool = False

    # Analytics
    risk_free_rate: float = 0.02
    projection_months: int = 12
    projection_growth_rate: float = 0.05

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "wealthtrack.db"
        return f"sqlite:///{db_path}"


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
