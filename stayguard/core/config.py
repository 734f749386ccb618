"""Application configuration and engine defaults."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_POLICIES_DIR = Path(__file__).resolve().parent.parent / "policies" / "data"


class Settings(BaseSettings):
    """Settings loaded from environment (prefix ``STAYGUARD_``) or ``.env``."""

    # API
    app_name: str = "StayGuard Compliance Engine"
    debug: bool = False

    # CORS - comma-separated origins, or "*"
    cors_origins: str = "*"

    # Policy table
    policies_dir: str = str(DEFAULT_POLICIES_DIR)

    # Fallback policy used when no country/visa policy matches (Schengen-style 90/180)
    default_max_days: int = 90
    default_period_days: int = 180
    use_default_policy: bool = True

    # Normalization: fail fast on the first invalid record, or collect errors
    strict_mode: bool = True

    # Planning
    safe_date_search_days: int = 365
    overstay_notice_days: int = 14

    model_config = SettingsConfigDict(
        env_prefix="STAYGUARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
