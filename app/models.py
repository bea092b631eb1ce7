"""Pydantic models describing upstream payloads and unified output."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class MediaKind(str, Enum):
    """Display kind hinted to the presentation layer."""

    MOVIE = "Movie"
    SERIES = "Series"


class TimeframeUnit(str, Enum):
    """Units accepted when computing a calendar window."""

    DAYS = "Days"
    WEEKS = "Weeks"
    MONTHS = "Months"
    YEARS = "Years"

    @classmethod
    def _missing_(cls, value: object) -> "TimeframeUnit | None":
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value.lower() == lowered:
                    return member
        return None


class ArrServiceType(str, Enum):
    """Automation-service families exposing a release calendar."""

    SONARR = "sonarr"
    RADARR = "radarr"
    LIDARR = "lidarr"
    READARR = "readarr"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class UnifiedMediaItem(BaseModel):
    """Normalized media entry returned to the display layer."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    name: str | None = None
    original_title: str | None = None
    media_kind: MediaKind
    source_type: str
    provider_ids: dict[str, str] = Field(default_factory=dict)
    premiere_date: date = date(1970, 1, 1)

    def to_payload(self) -> dict[str, object]:
        """Return a JSON-friendly representation for HTTP responses."""

        return {
            "Id": str(self.id),
            "Name": self.name,
            "OriginalTitle": self.original_title,
            "Type": self.media_kind.value,
            "SourceType": self.source_type,
            "ProviderIds": dict(self.provider_ids),
            "PremiereDate": self.premiere_date.isoformat(),
        }


class ServiceEndpointConfig(BaseModel):
    """Connection details for one external service."""

    model_config = ConfigDict(frozen=True)

    base_url: str | None = None
    api_key: str | None = None
    display_name: str

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)


class CalendarQueryParams(BaseModel):
    """Date-ranged calendar query for a single automation service."""

    model_config = ConfigDict(frozen=True)

    start_date: datetime
    end_date: datetime
    extra_query: dict[str, str] = Field(default_factory=dict)
    api_version: str = "v3"

    def to_query(self) -> dict[str, str]:
        """Return query parameters with family flags ahead of the date range."""

        params = dict(self.extra_query)
        params["start"] = self.start_date.strftime("%Y-%m-%dT%H:%M:%SZ")
        params["end"] = self.end_date.strftime("%Y-%m-%dT%H:%M:%SZ")
        return params


# ---------------------------------------------------------------------------
# Request broker (Jellyseerr/Overseerr) payloads
# ---------------------------------------------------------------------------


class BrokerModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class BrokerUser(BrokerModel):
    id: int
    jellyfin_username: str | None = Field(default=None, alias="jellyfinUsername")


class BrokerUserPage(BrokerModel):
    results: list[BrokerUser] = Field(default_factory=list)

    def find_user_id(self, username: str) -> int | None:
        """Return the broker id of the user linked to ``username``."""

        for user in self.results:
            if user.jellyfin_username == username:
                return user.id
        return None


class DiscoverResult(BrokerModel):
    """Single entry of a broker discovery page."""

    id: int = 0
    media_type: str | None = Field(default=None, alias="mediaType")
    title: str | None = None
    name: str | None = None
    original_title: str | None = Field(default=None, alias="originalTitle")
    original_name: str | None = Field(default=None, alias="originalName")
    original_language: str | None = Field(default=None, alias="originalLanguage")
    adult: bool | None = None
    poster_path: str | None = Field(default=None, alias="posterPath")
    first_air_date: str | None = Field(default=None, alias="firstAirDate")
    release_date: str | None = Field(default=None, alias="releaseDate")
    media_info: Any = Field(default=None, alias="mediaInfo")

    @property
    def display_title(self) -> str | None:
        return self.title if self.title is not None else self.name

    @property
    def display_original_title(self) -> str | None:
        if self.original_title is not None:
            return self.original_title
        return self.original_name

    @property
    def release_date_text(self) -> str:
        """Return ``firstAirDate``, then ``releaseDate``, then the epoch."""

        value = self.first_air_date if self.first_air_date is not None else self.release_date
        if value is None or not value.strip():
            return "1970-01-01"
        return value

    @property
    def media_info_present(self) -> bool:
        # Presence of the field marks the item as known to the library,
        # regardless of what the object contains.
        return self.media_info is not None

    @property
    def resolved_media_type(self) -> str:
        return self.media_type or "movie"


class DiscoverPage(BrokerModel):
    page: int | None = None
    total_pages: int | None = Field(default=None, alias="totalPages")
    results: list[dict[str, Any]] | None = None


class MediaRequestPayload(BaseModel):
    """Body accepted by the discover request endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(
        min_length=1, validation_alias=AliasChoices("username", "userName", "UserName")
    )
    media_type: str = Field(
        min_length=1, validation_alias=AliasChoices("mediaType", "media_type", "MediaType")
    )
    media_id: int = Field(validation_alias=AliasChoices("mediaId", "media_id", "MediaId"))


# ---------------------------------------------------------------------------
# Automation-service calendar payloads
# ---------------------------------------------------------------------------


class ArrModel(BaseModel):
    """Base for calendar payloads; JSON keys are matched case-insensitively."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _match_keys_case_insensitively(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        lookup: dict[str, str] = {}
        for field_name, field in cls.model_fields.items():
            lookup[field_name.lower()] = field.alias or field_name
            if field.alias:
                lookup[field.alias.lower()] = field.alias
        remapped: dict[str, Any] = {}
        for key, value in data.items():
            target = lookup.get(str(key).lower(), key)
            remapped.setdefault(target, value)
        return remapped


class ArrImage(ArrModel):
    cover_type: str | None = Field(default=None, alias="coverType")
    url: str | None = None
    remote_url: str | None = Field(default=None, alias="remoteUrl")


class SonarrSeries(ArrModel):
    id: int | None = None
    title: str | None = None
    tvdb_id: int | None = Field(default=None, alias="tvdbId")
    images: list[ArrImage] = Field(default_factory=list)


class SonarrEpisode(ArrModel):
    id: int | None = None
    series_id: int | None = Field(default=None, alias="seriesId")
    season_number: int | None = Field(default=None, alias="seasonNumber")
    episode_number: int | None = Field(default=None, alias="episodeNumber")
    title: str | None = None
    air_date_utc: datetime | None = Field(default=None, alias="airDateUtc")
    has_file: bool = Field(default=False, alias="hasFile")
    monitored: bool = True
    series: SonarrSeries | None = None


class RadarrMovie(ArrModel):
    id: int | None = None
    title: str | None = None
    original_title: str | None = Field(default=None, alias="originalTitle")
    year: int | None = None
    tmdb_id: int | None = Field(default=None, alias="tmdbId")
    in_cinemas: datetime | None = Field(default=None, alias="inCinemas")
    digital_release: datetime | None = Field(default=None, alias="digitalRelease")
    physical_release: datetime | None = Field(default=None, alias="physicalRelease")
    has_file: bool = Field(default=False, alias="hasFile")
    monitored: bool = True
    images: list[ArrImage] = Field(default_factory=list)


class LidarrArtist(ArrModel):
    id: int | None = None
    artist_name: str | None = Field(default=None, alias="artistName")


class LidarrAlbum(ArrModel):
    id: int | None = None
    title: str | None = None
    release_date: datetime | None = Field(default=None, alias="releaseDate")
    album_type: str | None = Field(default=None, alias="albumType")
    monitored: bool = True
    artist: LidarrArtist | None = None
    images: list[ArrImage] = Field(default_factory=list)


class ReadarrAuthor(ArrModel):
    id: int | None = None
    author_name: str | None = Field(default=None, alias="authorName")


class ReadarrBook(ArrModel):
    id: int | None = None
    title: str | None = None
    release_date: datetime | None = Field(default=None, alias="releaseDate")
    monitored: bool = True
    author: ReadarrAuthor | None = None
    images: list[ArrImage] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Section seam
# ---------------------------------------------------------------------------


class SectionInfo(BaseModel):
    """Describes a section the presentation layer can render."""

    section: str
    display_text: str
    kind: str
    limit: int = 1
    route: str | None = None
    additional_data: str | None = None
    view_mode: str = "Portrait"
    allow_view_mode_change: bool = False


class QueryResult(BaseModel):
    """Ordered result page returned by a section."""

    items: list[Any] = Field(default_factory=list)
    start_index: int = 0
    total_record_count: int = 0
    configured: bool = True

    @classmethod
    def from_items(cls, items: list[Any], *, configured: bool = True) -> "QueryResult":
        return cls(items=items, total_record_count=len(items), configured=configured)
