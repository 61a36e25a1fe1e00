from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="allow")

    environment: Literal["development", "staging", "production"] = "development"
    database_url: str = "sqlite+aiosqlite:///./rewards.db"
    database_echo: bool = False

    # Internal API security
    internal_api_key: str = ""

    # Tracing
    tracing_enabled: bool = True
    otel_exporter_otlp_endpoint: str | None = None
    otel_exporter_otlp_headers: str | None = None

    @field_validator("otel_exporter_otlp_endpoint", "otel_exporter_otlp_headers", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def otlp_headers(self) -> dict[str, str]:
        """Parse ``key=value,key2=value2`` exporter headers."""

        headers: dict[str, str] = {}
        for pair in (self.otel_exporter_otlp_headers or "").split(","):
            if "=" not in pair:
                continue
            key, value = pair.split("=", 1)
            headers[key.strip()] = value.strip()
        return headers

    # Lucky draw
    lucky_draw_max_selection_attempts: int = Field(default=5, ge=1)
    lucky_draw_coupon_validity_months: int = Field(default=1, ge=1, le=3)
    lucky_draw_subscription_credit_days: int = Field(default=30, ge=1)

    # Retail order-management API (discount code registration)
    retail_api_enabled: bool = False
    retail_api_base_url: str = ""
    retail_api_username: str = ""
    retail_api_password: str = ""
    retail_api_timeout_seconds: float = 10.0


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]


settings = get_settings()
