"""Application configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rainwatch.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the rainwatch proxy."""
    model_config = SettingsConfigDict(env_prefix="RAINWATCH_", extra="ignore")

    forecast_source: str = "open_meteo"  # options: open_meteo
    open_meteo_url: str = "https://api.open-meteo.com/v1/forecast"
    forecast_timezone: str = "auto"
    request_timeout_seconds: float | None = None  # None keeps the transport default
    default_hours: int = 12
    max_hours: int = 168
    default_threshold_mm: float = 0.1
    context_hours: int = 6
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    @field_validator("open_meteo_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")


settings = Settings()


if __name__ == "__main__":
    logger.logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")
