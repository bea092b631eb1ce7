"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Iterable, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .models import ArrServiceType, ServiceEndpointConfig, TimeframeUnit
from .section_definitions import DISCOVER_SECTIONS
from .utils import split_csv


DEFAULT_SECTION_KEYS: tuple[str, ...] = tuple(
    definition.key for definition in DISCOVER_SECTIONS
) + tuple(f"calendar-{service.value}" for service in ArrServiceType)


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="SeerrFeed", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    jellyseerr_url: str | None = Field(default=None, alias="JELLYSEERR_URL")
    jellyseerr_api_key: str | None = Field(default=None, alias="JELLYSEERR_API_KEY")
    jellyseerr_external_url: str | None = Field(
        default=None, alias="JELLYSEERR_EXTERNAL_URL"
    )
    jellyseerr_preferred_languages: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(), alias="JELLYSEERR_PREFERRED_LANGUAGES"
    )

    sonarr_url: str | None = Field(default=None, alias="SONARR_URL")
    sonarr_api_key: str | None = Field(default=None, alias="SONARR_API_KEY")
    radarr_url: str | None = Field(default=None, alias="RADARR_URL")
    radarr_api_key: str | None = Field(default=None, alias="RADARR_API_KEY")
    lidarr_url: str | None = Field(default=None, alias="LIDARR_URL")
    lidarr_api_key: str | None = Field(default=None, alias="LIDARR_API_KEY")
    readarr_url: str | None = Field(default=None, alias="READARR_URL")
    readarr_api_key: str | None = Field(default=None, alias="READARR_API_KEY")

    image_proxy_url: str | None = Field(default=None, alias="IMAGE_PROXY_URL")

    discover_item_limit: int = Field(
        default=20, alias="DISCOVER_ITEM_LIMIT", ge=1, le=100
    )
    section_keys: Annotated[tuple[str, ...], NoDecode] = Field(
        default=DEFAULT_SECTION_KEYS, alias="SECTION_KEYS"
    )
    calendar_timeframe_value: int = Field(
        default=7, alias="CALENDAR_TIMEFRAME_VALUE", ge=1, le=365
    )
    calendar_timeframe_unit: TimeframeUnit = Field(
        default=TimeframeUnit.DAYS, alias="CALENDAR_TIMEFRAME_UNIT"
    )
    date_format: str = Field(default="YYYY/MM/DD", alias="DATE_FORMAT")
    date_delimiter: str = Field(default="/", alias="DATE_DELIMITER")

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator(
        "jellyseerr_url",
        "jellyseerr_api_key",
        "jellyseerr_external_url",
        "sonarr_url",
        "sonarr_api_key",
        "radarr_url",
        "radarr_api_key",
        "lidarr_url",
        "lidarr_api_key",
        "readarr_url",
        "readarr_api_key",
        "image_proxy_url",
        mode="before",
    )
    @classmethod
    def _blank_as_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("jellyseerr_preferred_languages", mode="before")
    @classmethod
    def _parse_languages(cls, value: object) -> tuple[str, ...]:
        """Split comma separated language codes into a tuple."""

        if value is None:
            return ()
        if isinstance(value, str):
            return split_csv(value)
        if isinstance(value, Iterable):
            return split_csv(",".join(str(part) for part in value))
        raise TypeError("JELLYSEERR_PREFERRED_LANGUAGES must be a string or list")

    @field_validator("calendar_timeframe_unit", mode="before")
    @classmethod
    def _parse_timeframe_unit(cls, value: object) -> object:
        if isinstance(value, str):
            return TimeframeUnit(value)
        return value

    @field_validator("section_keys", mode="before")
    @classmethod
    def _parse_section_keys(cls, value: object) -> tuple[str, ...]:
        """Normalise section key selections from environment values."""

        if value is None:
            return DEFAULT_SECTION_KEYS
        if isinstance(value, str):
            raw_values = [part.strip() for part in value.split(",")]
        elif isinstance(value, Iterable):
            raw_values = [str(part).strip() for part in value]
        else:
            raise TypeError("SECTION_KEYS must be a string or iterable of strings")

        cleaned: list[str] = []
        for entry in raw_values:
            if not entry:
                continue
            slug = entry.replace("_", "-").replace(" ", "-").lower()
            slug = "-".join(filter(None, slug.split("-")))
            if not slug:
                continue
            if slug not in DEFAULT_SECTION_KEYS:
                raise ValueError("Unknown section keys configured")
            if slug not in cleaned:
                cleaned.append(slug)
        if not cleaned:
            return DEFAULT_SECTION_KEYS
        return tuple(cleaned)

    @property
    def jellyseerr_display_url(self) -> str:
        """URL users should be sent to when opening the broker."""

        return self.jellyseerr_external_url or self.jellyseerr_url or ""

    def service_config(self, service: ArrServiceType) -> ServiceEndpointConfig:
        """Return the connection details for an automation service."""

        return ServiceEndpointConfig(
            base_url=getattr(self, f"{service.value}_url"),
            api_key=getattr(self, f"{service.value}_api_key"),
            display_name=service.display_name,
        )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", populate_by_name=True
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
