# backend/reserve_api/config.py

from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/reserve.db"
    log_level: str = "INFO"

    # Merchant operating region: every "today" / cutoff comparison uses it
    timezone: str = "Europe/Paris"
    phone_country_code: str = "33"

    booking_source: str = "google"
    default_customer_name: str = "Client Google"

    # Partner endpoints (/google/*)
    partner_api_key: str = ""
    partner_hmac_secret: str = ""

    # Not wired in production yet, kept behind flags
    slot_rounding_enabled: bool = False
    party_size_filter_enabled: bool = False

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @field_validator("partner_api_key", "partner_hmac_secret", mode="after")
    @classmethod
    def strip_secret(cls, v: str) -> str:
        return (v or "").strip()

    @field_validator("phone_country_code", mode="after")
    @classmethod
    def strip_plus(cls, v: str) -> str:
        return v.strip().lstrip("+")

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative SQLite path -> absolute, anchored at the repo root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
