"""Application configuration with comprehensive validation."""
from typing import Optional, Literal, List
from functools import lru_cache
from pydantic import Field, field_validator, model_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# DISPATCH CHANNELS
# =============================================================================
# Maps a downstream channel name -> function path under DISPATCH_BASE_URL.
# Every channel receives the same {"lead_id": ...} payload once a score
# has been persisted.
# =============================================================================

DISPATCH_CHANNEL_PATHS = {
    "results_email": "/functions/v1/send-results-email",
    "webhook": "/functions/v1/fire-webhook",
    "crm_sync": "/functions/v1/crm-sync",
}


class Settings(BaseSettings):
    """Application settings with production-grade validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Assessment Scoring Engine"
    APP_VERSION: str = "1.0.0"
    APP_ENV: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"

    # API
    API_V1_PREFIX: str = "/api/v1"

    # Snowflake
    SNOWFLAKE_ACCOUNT: str = ""
    SNOWFLAKE_USER: str = ""
    SNOWFLAKE_PASSWORD: SecretStr = SecretStr("")
    SNOWFLAKE_DATABASE: str = ""
    SNOWFLAKE_SCHEMA: str = ""
    SNOWFLAKE_WAREHOUSE: str = ""
    SNOWFLAKE_ROLE: str = ""

    # Redis (dispatch queue)
    REDIS_URL: str = "redis://localhost:6379/0"
    DISPATCH_QUEUE_KEY: str = "scoring:completed"

    # Downstream dispatch
    DISPATCH_BASE_URL: str = "http://localhost:54321"
    DISPATCH_SERVICE_KEY: Optional[SecretStr] = None
    DISPATCH_CHANNELS: List[str] = Field(default=["results_email", "webhook"])
    DISPATCH_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0, le=120)
    DISPATCH_POLL_TIMEOUT_SECONDS: int = Field(default=5, ge=1, le=60)

    # Scoring defaults for scale questions
    SLIDING_SCALE_DEFAULT_MAX: int = Field(default=10, ge=1)
    RATING_SCALE_DEFAULT_MAX: int = Field(default=5, ge=1)
    SCALE_USE_CACHED_POINTS: bool = False

    @field_validator("DISPATCH_CHANNELS")
    @classmethod
    def validate_dispatch_channels(cls, v: List[str]) -> List[str]:
        unknown = [c for c in v if c not in DISPATCH_CHANNEL_PATHS]
        if unknown:
            raise ValueError(f"Unknown dispatch channels: {unknown}")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Ensure production has required security settings."""
        if self.APP_ENV == "production":
            if self.DEBUG:
                raise ValueError("DEBUG must be False in production")
            if self.DISPATCH_SERVICE_KEY is None:
                raise ValueError("DISPATCH_SERVICE_KEY is required in production")
        return self

    @property
    def dispatch_endpoints(self) -> dict:
        """Get channel name -> absolute URL for every enabled channel."""
        base = self.DISPATCH_BASE_URL.rstrip("/")
        return {c: f"{base}{DISPATCH_CHANNEL_PATHS[c]}" for c in self.DISPATCH_CHANNELS}


@lru_cache
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
