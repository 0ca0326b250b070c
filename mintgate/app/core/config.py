from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables or .env file.
    """

    # Wait loop settings
    throttle_max_wait_ms: int = 300_000  # Give up after 5 minutes
    throttle_min_poll_interval_ms: int = 100  # Floor on re-evaluation interval

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    @field_validator("throttle_max_wait_ms", "throttle_min_poll_interval_ms")
    @classmethod
    def validate_wait_positive(cls, v: int) -> int:
        """Validate wait durations are positive."""
        if v < 1:
            raise ValueError("Wait durations must be at least 1ms")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format is one of the supported renderers."""
        value = v.strip().lower()
        if value not in ("text", "structured", "json"):
            raise ValueError("log_format must be one of: text, structured, json")
        return value

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Global settings instance
settings = Settings()
