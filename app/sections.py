"""Home screen sections exposing aggregated content to the display layer."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

from .config import Settings
from .models import ArrServiceType, QueryResult, SectionInfo
from .section_definitions import DISCOVER_SECTION_MAP, DiscoverSectionDefinition
from .services.arr import ArrCalendarClient
from .services.jellyseerr import JellyseerrClient
from .utils import calculate_end_date, format_date


class HomeScreenSection(Protocol):
    key: str

    def get_info(self) -> SectionInfo: ...

    async def get_results(self, username: str) -> QueryResult: ...


class DiscoverSection:
    """Section listing broker items that are not yet in the library."""

    def __init__(
        self,
        definition: DiscoverSectionDefinition,
        jellyseerr: JellyseerrClient,
        *,
        limit: int,
    ) -> None:
        self.key = definition.key
        self._definition = definition
        self._jellyseerr = jellyseerr
        self._limit = limit

    def get_info(self) -> SectionInfo:
        return SectionInfo(
            section=self.key,
            display_text=self._definition.title,
            kind="discover",
            additional_data=self._definition.endpoint,
        )

    async def get_results(self, username: str) -> QueryResult:
        items = await self._jellyseerr.fetch_recommendations(
            self._definition.endpoint, username
        )
        payload = [item.to_payload() for item in items[: self._limit]]
        return QueryResult.from_items(payload, configured=self._jellyseerr.is_configured)


class CalendarSection:
    """Section listing upcoming releases from one automation service."""

    def __init__(
        self,
        service: ArrServiceType,
        calendar: ArrCalendarClient,
        settings: Settings,
    ) -> None:
        self.key = f"calendar-{service.value}"
        self._service = service
        self._calendar = calendar
        self._settings = settings

    def get_info(self) -> SectionInfo:
        return SectionInfo(
            section=self.key,
            display_text=f"Upcoming on {self._service.display_name}",
            kind="calendar",
            additional_data=self._service.value,
            view_mode="Landscape",
        )

    def window(self, now: datetime | None = None) -> tuple[datetime, datetime]:
        """Return the calendar window starting today."""

        current = now or datetime.now(timezone.utc)
        start = current.replace(hour=0, minute=0, second=0, microsecond=0)
        end = calculate_end_date(
            start,
            self._settings.calendar_timeframe_value,
            self._settings.calendar_timeframe_unit,
        )
        return start, end

    async def get_results(self, username: str) -> QueryResult:
        start, end = self.window()
        items = await self._calendar.fetch_calendar(self._service, start, end)
        if items is None:
            return QueryResult.from_items([], configured=False)

        payload: list[dict[str, object]] = []
        for item in items:
            entry = item.model_dump(mode="json")
            release = _release_date(item)
            if release is not None:
                entry["displayDate"] = format_date(
                    release, self._settings.date_format, self._settings.date_delimiter
                )
            payload.append(entry)
        return QueryResult.from_items(payload)


def _release_date(item: object) -> datetime | None:
    for attribute in (
        "air_date_utc",
        "in_cinemas",
        "digital_release",
        "physical_release",
        "release_date",
    ):
        value = getattr(item, attribute, None)
        if isinstance(value, datetime):
            return value
    return None


class SectionRegistry:
    """Enabled sections keyed by their identifier."""

    def __init__(self, sections: list[HomeScreenSection]) -> None:
        self._sections = {section.key: section for section in sections}

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        jellyseerr: JellyseerrClient,
        calendar: ArrCalendarClient,
    ) -> "SectionRegistry":
        available: dict[str, HomeScreenSection] = {}
        for key, definition in DISCOVER_SECTION_MAP.items():
            available[key] = DiscoverSection(
                definition, jellyseerr, limit=settings.discover_item_limit
            )
        for service in ArrServiceType:
            section = CalendarSection(service, calendar, settings)
            available[section.key] = section
        return cls([available[key] for key in settings.section_keys])

    def list_info(self) -> list[SectionInfo]:
        return [section.get_info() for section in self._sections.values()]

    def get(self, key: str) -> HomeScreenSection:
        try:
            return self._sections[key]
        except KeyError:
            raise KeyError(f"Unknown section: {key}") from None
