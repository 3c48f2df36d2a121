"""Service configuration pulled from WEATHER_* environment variables via pydantic."""
import json
from typing import Annotated, List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="config")

DEFAULT_LOCATIONS = ["Delhi", "Mumbai", "Chennai", "Bangalore", "Kolkata", "Hyderabad"]


class Settings(BaseSettings):
    """Environment-driven configuration for the weather monitor."""
    model_config = SettingsConfigDict(env_prefix="WEATHER_", extra="ignore")

    openweather_api_key: str | None = None
    openweather_base_url: str = "https://api.openweathermap.org/data/2.5"
    country_code: str = "IN"
    provider_timeout_seconds: float = 10.0

    # Ordered; the poller sweeps them in this order.
    locations: Annotated[List[str], NoDecode] = list(DEFAULT_LOCATIONS)

    redis_url: str | None = None
    database_url: str = "sqlite:///./weather.db"
    current_ttl_seconds: int = 300
    forecast_ttl_seconds: int = 1800

    enable_poller: bool = True
    poll_on_start: bool = True
    poll_interval_seconds: float = 300.0

    alert_threshold_celsius: float = 35.0
    alert_consecutive_readings: int = 2

    # Calendar days for summaries are cut in this zone.
    timezone: str = "UTC"

    # Per-client limit on /api requests, counted in fixed windows.
    rate_limit_enabled: bool = True
    rate_limit_max_requests: int = 100
    rate_limit_window_seconds: int = 900

    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    alert_email_from: str | None = None
    alert_email_to: str | None = None

    log_level: str = "INFO"

    @field_validator("openweather_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("locations", mode="before")
    @classmethod
    def split_locations(cls, v):
        """Accept a JSON list or a comma-separated string."""
        if isinstance(v, str):
            raw = v.strip()
            if raw.startswith("["):
                return json.loads(raw)
            return [item.strip() for item in raw.split(",") if item.strip()]
        return v

    @field_validator("locations", mode="after")
    @classmethod
    def check_locations(cls, v: List[str]) -> List[str]:
        """Require a non-empty list without duplicates."""
        if not v:
            raise ValueError("at least one location must be configured")
        if len(set(v)) != len(v):
            raise ValueError("locations must be unique")
        return v

    @field_validator("alert_consecutive_readings", mode="after")
    @classmethod
    def check_consecutive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("alert_consecutive_readings must be at least 1")
        return v

    @field_validator("rate_limit_max_requests", "rate_limit_window_seconds", mode="after")
    @classmethod
    def check_rate_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("rate limit settings must be at least 1")
        return v

    @field_validator("timezone", mode="after")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone {v!r}") from exc
        return v

    def masked_urls(self) -> dict:
        """Connection URLs with credentials hidden, for start-up logging."""
        return {
            "database_url": mask_url(self.database_url),
            "redis_url": mask_url(self.redis_url) if self.redis_url else None,
        }


settings = Settings()


if __name__ == "__main__":
    logger.logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4, exclude={'openweather_api_key', 'smtp_password'})}")
