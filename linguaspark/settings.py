import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field


class Settings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Backend API
    api_base_url: str = Field(
        default="http://localhost:5000/api", alias="LINGUASPARK_API_URL"
    )
    api_token: str | None = Field(default=None, alias="LINGUASPARK_API_TOKEN")
    request_timeout: float = Field(default=30.0, alias="LINGUASPARK_REQUEST_TIMEOUT")

    # Request cache (TTLs in seconds)
    cache_max_size: int = Field(default=200, alias="LINGUASPARK_CACHE_MAX_SIZE")
    text_cache_ttl: int = Field(default=30 * 60, alias="LINGUASPARK_TEXT_CACHE_TTL")
    image_cache_ttl: int = Field(default=24 * 60 * 60, alias="LINGUASPARK_IMAGE_CACHE_TTL")
    game_content_cache_ttl: int = Field(default=10 * 60, alias="LINGUASPARK_GAME_CONTENT_CACHE_TTL")
    cache_cleanup_interval_minutes: int = Field(
        default=5, alias="LINGUASPARK_CACHE_CLEANUP_INTERVAL"
    )

    # Retry
    content_max_retries: int = Field(default=3, alias="LINGUASPARK_CONTENT_MAX_RETRIES")
    image_max_retries: int = Field(default=2, alias="LINGUASPARK_IMAGE_MAX_RETRIES")
    max_retry_delay: float = Field(default=30.0, alias="LINGUASPARK_MAX_RETRY_DELAY")

    # Monitoring
    error_log_size: int = Field(default=1000, alias="LINGUASPARK_ERROR_LOG_SIZE")

    optimize_requests: bool = Field(default=True, alias="LINGUASPARK_OPTIMIZE_REQUESTS")
    log_level: str = Field(default="INFO", alias="LINGUASPARK_LOG_LEVEL")
    debug: bool = Field(default=False, alias="LINGUASPARK_DEBUG")


def load_settings() -> Settings:
    """Load settings from `.env` and the process environment."""
    load_dotenv()
    return Settings.model_validate(dict(os.environ))
