"""Client for the calendar endpoints of the *arr automation services."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from ..config import Settings
from ..models import (
    ArrServiceType,
    CalendarQueryParams,
    LidarrAlbum,
    RadarrMovie,
    ReadarrBook,
    SonarrEpisode,
)

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT", bound=BaseModel)

CALENDAR_ITEM_TYPES: dict[ArrServiceType, type[BaseModel]] = {
    ArrServiceType.SONARR: SonarrEpisode,
    ArrServiceType.RADARR: RadarrMovie,
    ArrServiceType.LIDARR: LidarrAlbum,
    ArrServiceType.READARR: ReadarrBook,
}

_FAMILY_QUERY: dict[ArrServiceType, tuple[dict[str, str], str]] = {
    ArrServiceType.SONARR: ({"includeSeries": "true"}, "v3"),
    ArrServiceType.RADARR: ({}, "v3"),
    ArrServiceType.LIDARR: ({}, "v1"),
    ArrServiceType.READARR: ({"includeAuthor": "true"}, "v1"),
}


def build_calendar_query(
    service: ArrServiceType, start: datetime, end: datetime
) -> CalendarQueryParams:
    """Return the calendar query flags and API version for ``service``."""

    extra, version = _FAMILY_QUERY.get(service, ({}, "v3"))
    return CalendarQueryParams(
        start_date=start, end_date=end, extra_query=extra, api_version=version
    )


class ArrCalendarClient:
    """Fetch release calendars from Sonarr, Radarr, Lidarr and Readarr."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._settings = settings
        self._client = http_client

    async def fetch_calendar(
        self,
        service: ArrServiceType,
        start: datetime,
        end: datetime,
        item_type: type[ItemT] | None = None,
    ) -> list[Any] | None:
        """Return calendar entries, ``[]`` when nothing is scheduled, or ``None``.

        ``None`` means the service is not configured or could not be read.
        """

        config = self._settings.service_config(service)
        if not config.is_configured:
            logger.warning("%s URL or API key not configured", config.display_name)
            return None

        model = item_type or CALENDAR_ITEM_TYPES[service]
        query = build_calendar_query(service, start, end)
        url = f"{(config.base_url or '').rstrip('/')}/api/{query.api_version}/calendar"

        try:
            logger.debug("Fetching %s calendar from %s", config.display_name, url)
            response = await self._client.get(
                url,
                params=query.to_query(),
                headers={"X-API-KEY": config.api_key or ""},
            )
            if not response.is_success:
                logger.error(
                    "Failed to fetch %s calendar. Status: %s, Reason: %s",
                    config.display_name,
                    response.status_code,
                    response.reason_phrase,
                )
                return None

            if not response.content:
                logger.warning("Empty response from %s calendar API", config.display_name)
                return []

            payload = response.json()
            if payload is None:
                return []
            items = TypeAdapter(list[model]).validate_python(payload)
        except httpx.HTTPError as exc:
            logger.error("HTTP error while fetching %s calendar: %s", config.display_name, exc)
            return None
        except (ValueError, ValidationError) as exc:
            logger.error(
                "JSON parsing error while processing %s calendar response: %s",
                config.display_name,
                exc,
            )
            return None
        except Exception:
            logger.exception("Unexpected error while fetching %s calendar", config.display_name)
            return None

        logger.debug(
            "Successfully fetched %s calendar items from %s", len(items), config.display_name
        )
        return items
