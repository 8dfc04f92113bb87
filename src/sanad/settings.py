from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PeakWindow(BaseModel):
    """Hour range [start, end) during which the peak multiplier applies."""

    start: int = Field(ge=0, le=23)
    end: int = Field(ge=1, le=24)

    @model_validator(mode="after")
    def validate_order(self) -> "PeakWindow":
        if self.start >= self.end:
            raise ValueError(f"Peak window start ({self.start}) must be before end ({self.end})")
        return self

    def contains(self, hour: int) -> bool:
        return self.start <= hour < self.end


class FareSettings(BaseSettings):
    """Tariff used for client-side fare estimates (KWD)."""

    base_fare: float = Field(default=2.0, ge=0.0)
    price_per_km: float = Field(default=1.5, ge=0.0)
    price_per_minute: float = Field(default=0.5, ge=0.0)
    minimum_fare: float = Field(default=3.0, ge=0.0)
    currency: str = "KWD"
    currency_symbol: str = "د.ك"
    peak_multiplier: float = Field(
        default=1.5,
        ge=1.0,
        le=5.0,
        description="Multiplier applied inside peak windows",
    )
    peak_windows: list[PeakWindow] = Field(
        default_factory=lambda: [PeakWindow(start=7, end=9), PeakWindow(start=17, end=20)],
        description="Morning and evening rush hours",
    )
    timezone: str = Field(
        default="Asia/Kuwait",
        description="Zone in which peak windows are expressed",
    )
    average_speed_kmh: float = Field(
        default=40.0,
        gt=0.0,
        le=200.0,
        description="Average speed used to estimate trip duration offline",
    )

    model_config = SettingsConfigDict(env_prefix="FARE_")


class StoreSettings(BaseSettings):
    api_enabled: bool = Field(
        default=False,
        description="Delegate store operations to the remote API instead of local-only mode",
    )
    backend: Literal["memory", "file", "sqlite"] = "file"
    path: str = Field(
        default=".sanad",
        description="Directory for the file backend, database file for sqlite",
    )
    owner_id: str | None = Field(
        default=None,
        description="Authenticated user that owns locally created records",
    )

    model_config = SettingsConfigDict(env_prefix="STORE_")


class APISettings(BaseSettings):
    base_url: str = ""
    timeout_seconds: float = Field(default=30.0, gt=0.0, le=120.0)

    model_config = SettingsConfigDict(env_prefix="API_")

    @field_validator("base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("API base URL must start with http:// or https://")
        return v.rstrip("/")


class LoggingSettings(BaseSettings):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["text", "json"] = "text"
    environment: str = "development"

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    store: StoreSettings = Field(default_factory=StoreSettings)
    api: APISettings = Field(default_factory=APISettings)
    fare: FareSettings = Field(default_factory=FareSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_api_reachable(self) -> "Settings":
        if self.store.api_enabled and not self.api.base_url:
            raise ValueError("API_BASE_URL is required when STORE_API_ENABLED is true")
        return self


def get_settings() -> Settings:
    """Load and validate settings from environment variables."""
    return Settings()
