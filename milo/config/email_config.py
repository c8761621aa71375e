"""Settings for the daily digest and its e-mail delivery."""

from __future__ import annotations

from functools import lru_cache
import json
from typing import Annotated, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

load_dotenv()


class EmailConfig(BaseSettings):
    """Settings controlling digest selection, scheduling and delivery."""

    resend_api_key: Optional[str] = Field(None, alias="RESEND_API_KEY")
    resend_api_url: str = Field("https://api.resend.com/emails", alias="RESEND_API_URL")
    email_timeout: float = Field(15.0, alias="EMAIL_TIMEOUT")

    digest_from: str = Field(
        "Archpoint Labs <notifications@archpointlabs.com>",
        alias="DIGEST_FROM",
    )
    digest_recipients: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["matt@archpointlabs.com"],
        alias="DIGEST_RECIPIENTS",
    )
    digest_window_hours: int = Field(24, alias="DIGEST_WINDOW_HOURS")

    digest_schedule_enabled: bool = Field(False, alias="DIGEST_SCHEDULE_ENABLED")
    digest_time_utc: str = Field("08:00", alias="DIGEST_TIME_UTC")

    @field_validator("digest_recipients", mode="before")
    @classmethod
    def parse_recipients(cls, value: list[str] | str | None) -> list[str]:
        if value is None:
            return []
        if isinstance(value, list):
            return [str(item).strip() for item in value if str(item).strip()]
        candidate = value.strip()
        if candidate.startswith("["):
            try:
                parsed = json.loads(candidate)
            except json.JSONDecodeError as exc:
                raise ValueError("DIGEST_RECIPIENTS must be valid JSON when given as a list") from exc
            if not isinstance(parsed, list):
                raise ValueError("DIGEST_RECIPIENTS must decode to a list of addresses")
            return [str(item).strip() for item in parsed if str(item).strip()]
        return [part.strip() for part in candidate.split(",") if part.strip()]

    @field_validator("digest_recipients")
    @classmethod
    def require_recipients(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("DIGEST_RECIPIENTS must name at least one address")
        return value

    @field_validator("digest_window_hours")
    @classmethod
    def validate_window(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("DIGEST_WINDOW_HOURS must be positive")
        return value

    @field_validator("digest_time_utc")
    @classmethod
    def validate_digest_time(cls, value: str) -> str:
        parts = value.strip().split(":")
        if len(parts) != 2 or not all(part.isdigit() for part in parts):
            raise ValueError("DIGEST_TIME_UTC must look like HH:MM")
        hour, minute = int(parts[0]), int(parts[1])
        if not (0 <= hour < 24 and 0 <= minute < 60):
            raise ValueError("DIGEST_TIME_UTC must be a valid 24h time")
        return f"{hour:02d}:{minute:02d}"

    @field_validator("email_timeout")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("EMAIL_TIMEOUT must be positive")
        return value

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    @property
    def digest_hour_minute(self) -> tuple[int, int]:
        hour, minute = self.digest_time_utc.split(":")
        return int(hour), int(minute)


@lru_cache()
def get_email_config() -> EmailConfig:
    """Return a cached e-mail configuration instance."""

    return EmailConfig()
