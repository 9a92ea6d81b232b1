from pydantic_settings import BaseSettings, SettingsConfigDict

from storage_brain.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_POLL_MAX_WAIT_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
)


class Settings(BaseSettings):
    """SDK configuration loaded from ``STORAGE_BRAIN_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_BRAIN_",
        env_file=".env",
        extra="ignore",
    )

    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_retries: int = DEFAULT_MAX_RETRIES

    poll_max_wait_seconds: float = DEFAULT_POLL_MAX_WAIT_SECONDS
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS

    log_level: str = "INFO"
