"""Service settings loaded from the environment (prefix ``CHATLENS_``)."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from chatlens_analytics.bucketing import BucketingProfile


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CHATLENS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Service
    api_host: str = "127.0.0.1"
    api_port: int = 8500
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # Panel sizes
    contribution_limit: int = 30
    activity_participant_limit: int = 3
    highlight_limit: int = 5

    # Bucketing thresholds, in whole days of span
    general_daily_max_days: int = 60
    general_weekly_max_days: int = 365
    trend_daily_max_days: int = 90
    trend_weekly_max_days: int = 730

    def general_profile(self) -> BucketingProfile:
        return BucketingProfile(
            "general",
            daily_max_days=self.general_daily_max_days,
            weekly_max_days=self.general_weekly_max_days,
        )

    def trend_profile(self) -> BucketingProfile:
        return BucketingProfile(
            "sentiment_trend",
            daily_max_days=self.trend_daily_max_days,
            weekly_max_days=self.trend_weekly_max_days,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
