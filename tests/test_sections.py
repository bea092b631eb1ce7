"""Tests for the section seam used by the display layer."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx
import pytest

from app.config import Settings
from app.models import ArrServiceType
from app.section_definitions import DISCOVER_SECTION_MAP
from app.sections import CalendarSection, DiscoverSection, SectionRegistry
from app.services.arr import ArrCalendarClient
from app.services.jellyseerr import JellyseerrClient


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


def build_settings(**overrides: Any) -> Settings:
    base = {
        "JELLYSEERR_URL": "http://seerr.local",
        "JELLYSEERR_API_KEY": "secret",
        "SONARR_URL": "http://sonarr.local",
        "SONARR_API_KEY": "sonarr-key",
        "DATE_FORMAT": "DD/MM/YYYY",
        "DATE_DELIMITER": "-",
    }
    base.update(overrides)
    return Settings(_env_file=None, **base)  # type: ignore[arg-type]


def handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/api/v1/user":
        return httpx.Response(200, json={"results": [{"id": 1, "jellyfinUsername": "alice"}]})
    if request.url.path.startswith("/api/v1/discover"):
        page = int(request.url.params["page"])
        return httpx.Response(
            200,
            json={"results": [{"id": page * 10 + i, "title": f"T{i}"} for i in range(8)]},
        )
    if request.url.path == "/api/v3/calendar":
        return httpx.Response(
            200,
            json=[{"id": 5, "title": "Finale", "airDateUtc": "2024-03-05T01:00:00Z"}],
        )
    return httpx.Response(404)


@pytest.mark.anyio("asyncio")
async def test_discover_section_trims_to_limit() -> None:
    settings = build_settings(DISCOVER_ITEM_LIMIT=5)
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        section = DiscoverSection(
            DISCOVER_SECTION_MAP["discover-tv"],
            JellyseerrClient(settings, http_client),
            limit=settings.discover_item_limit,
        )
        result = await section.get_results("alice")

    assert result.total_record_count == 5
    assert [item["Name"] for item in result.items] == ["T0", "T1", "T2", "T3", "T4"]
    info = section.get_info()
    assert info.section == "discover-tv"
    assert info.additional_data == "/api/v1/discover/tv"


@pytest.mark.anyio("asyncio")
async def test_calendar_section_formats_display_dates() -> None:
    settings = build_settings()
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        section = CalendarSection(
            ArrServiceType.SONARR, ArrCalendarClient(settings, http_client), settings
        )
        result = await section.get_results("alice")

    assert result.configured is True
    assert result.items[0]["title"] == "Finale"
    assert result.items[0]["displayDate"] == "05-03-2024"


@pytest.mark.anyio("asyncio")
async def test_calendar_section_reports_unconfigured_service() -> None:
    settings = build_settings()
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        section = CalendarSection(
            ArrServiceType.LIDARR, ArrCalendarClient(settings, http_client), settings
        )
        result = await section.get_results("alice")

    assert result.configured is False
    assert result.items == []


def test_calendar_window_uses_timeframe() -> None:
    settings = build_settings(CALENDAR_TIMEFRAME_VALUE=1, CALENDAR_TIMEFRAME_UNIT="Months")
    section = CalendarSection(
        ArrServiceType.SONARR, ArrCalendarClient(settings, None), settings  # type: ignore[arg-type]
    )

    start, end = section.window(datetime(2024, 1, 31, 15, 0, tzinfo=timezone.utc))

    assert start == datetime(2024, 1, 31, tzinfo=timezone.utc)
    assert end == datetime(2024, 2, 29, tzinfo=timezone.utc)


def test_registry_follows_configured_keys() -> None:
    settings = build_settings(SECTION_KEYS="calendar-radarr,discover")
    registry = SectionRegistry.from_settings(
        settings,
        JellyseerrClient(settings, None),  # type: ignore[arg-type]
        ArrCalendarClient(settings, None),  # type: ignore[arg-type]
    )

    assert [info.section for info in registry.list_info()] == ["calendar-radarr", "discover"]
    with pytest.raises(KeyError):
        registry.get("upcoming-tv")


def test_registry_registers_every_discover_definition() -> None:
    settings = build_settings()
    registry = SectionRegistry.from_settings(
        settings,
        JellyseerrClient(settings, None),  # type: ignore[arg-type]
        ArrCalendarClient(settings, None),  # type: ignore[arg-type]
    )

    for key, definition in DISCOVER_SECTION_MAP.items():
        info = registry.get(key).get_info()
        assert info.display_text == definition.title
        assert info.additional_data == definition.endpoint
