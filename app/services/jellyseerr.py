"""Client aggregating discovery content from a Jellyseerr/Overseerr instance."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..models import (
    BrokerUserPage,
    DiscoverPage,
    DiscoverResult,
    MediaKind,
    UnifiedMediaItem,
)
from ..utils import parse_premiere_date, stable_id
from .image_cache import ImageReferenceResolver

logger = logging.getLogger(__name__)

PROVIDER_NAME = "jellyseerr"
POSTER_TEMPLATE = "https://image.tmdb.org/t/p/w600_and_h900_bestv2{path}"
MAX_ITEMS = 20
MAX_PAGES = 5


class JellyseerrClient:
    """Thin wrapper around the request broker HTTP API."""

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        image_resolver: ImageReferenceResolver | None = None,
    ) -> None:
        self._settings = settings
        self._client = http_client
        self._images = image_resolver or ImageReferenceResolver()

    @property
    def is_configured(self) -> bool:
        return bool(self._settings.jellyseerr_url and self._settings.jellyseerr_api_key)

    def _url(self, path: str) -> str:
        base = (self._settings.jellyseerr_url or "").rstrip("/")
        return f"{base}{path}"

    def _headers(self, user_id: int | None = None) -> dict[str, str]:
        headers = {
            "X-Api-Key": self._settings.jellyseerr_api_key or "",
            "Accept": "application/json",
        }
        if user_id is not None:
            headers["X-Api-User"] = str(user_id)
        return headers

    async def resolve_user_id(self, username: str) -> int | None:
        """Return the broker-side id of the user linked to ``username``.

        Raises ``httpx.HTTPError`` or ``ValueError`` on transport and parse
        failures; callers decide how to degrade.
        """

        response = await self._client.get(
            self._url("/api/v1/user"),
            params={"q": username},
            headers=self._headers(),
        )
        if not response.is_success:
            logger.error(
                "Failed to get Jellyseerr user. Status: %s", response.status_code
            )
            return None

        page = BrokerUserPage.model_validate(response.json())
        user_id = page.find_user_id(username)
        if user_id is None:
            logger.warning("Jellyseerr user not found for Jellyfin user: %s", username)
        return user_id

    async def fetch_recommendations(
        self, endpoint: str, username: str
    ) -> list[UnifiedMediaItem]:
        """Collect not-yet-available items from a discovery endpoint.

        At most ``MAX_PAGES`` pages are requested and paging stops once
        ``MAX_ITEMS`` items have been gathered. Failures never propagate:
        whatever was collected before the error is returned.
        """

        results: list[UnifiedMediaItem] = []

        if not self.is_configured:
            logger.warning("Jellyseerr URL or API Key is not configured.")
            return results

        try:
            user_id = await self.resolve_user_id(username)
            if user_id is None:
                return results

            page = 1
            while len(results) < MAX_ITEMS and page <= MAX_PAGES:
                entries = await self._fetch_page(endpoint, page, user_id)
                if entries is None:
                    break
                for entry in entries:
                    if len(results) >= MAX_ITEMS:
                        break
                    item = self._normalize(entry)
                    if item is not None:
                        results.append(item)
                page += 1
        except Exception:
            logger.exception("Error fetching Jellyseerr content.")

        return results

    async def _fetch_page(
        self, endpoint: str, page: int, user_id: int
    ) -> list[dict[str, Any]] | None:
        response = await self._client.get(
            self._url(endpoint),
            params={"page": page},
            headers=self._headers(user_id),
        )
        if not response.is_success:
            logger.error(
                "Failed to get Jellyseerr content from %s. Status: %s",
                endpoint,
                response.status_code,
            )
            return None
        if not response.content:
            return None

        payload = DiscoverPage.model_validate(response.json())
        return payload.results

    def _normalize(self, entry: dict[str, Any]) -> UnifiedMediaItem | None:
        """Return a unified item, or ``None`` when the entry is filtered out."""

        if not isinstance(entry, dict):
            return None
        try:
            result = DiscoverResult.model_validate(entry)
        except ValidationError:
            logger.debug("Skipping malformed discovery entry: %s", entry)
            return None

        if result.adult:
            return None

        languages = self._settings.jellyseerr_preferred_languages
        if languages and result.original_language is not None:
            if result.original_language not in languages:
                return None

        if result.media_info_present:
            return None

        media_type = result.resolved_media_type
        poster_url = ""
        if result.poster_path:
            poster_url = self._images.resolve(
                POSTER_TEMPLATE.format(path=result.poster_path)
            )

        return UnifiedMediaItem(
            id=stable_id(PROVIDER_NAME, media_type, result.id),
            name=result.display_title,
            original_title=result.display_original_title,
            media_kind=(
                MediaKind.SERIES if media_type.lower() == "tv" else MediaKind.MOVIE
            ),
            source_type=media_type,
            provider_ids={
                "JellyseerrRoot": self._settings.jellyseerr_display_url,
                "Jellyseerr": str(result.id),
                "JellyseerrPoster": poster_url,
            },
            premiere_date=parse_premiere_date(result.release_date_text),
        )

    async def request_media(self, username: str, media_type: str, media_id: int) -> bool:
        """Submit a single request for ``media_id`` on behalf of ``username``."""

        if not self.is_configured:
            logger.warning("Jellyseerr URL or API Key is not configured.")
            return False

        try:
            user_id = await self.resolve_user_id(username)
            if user_id is None:
                return False

            response = await self._client.post(
                self._url("/api/v1/request"),
                json={"mediaType": media_type, "mediaId": media_id},
                headers=self._headers(user_id),
            )
        except Exception:
            logger.exception("Error submitting Jellyseerr request for %s", media_id)
            return False

        if not response.is_success:
            logger.error(
                "Jellyseerr request for %s %s failed. Status: %s",
                media_type,
                media_id,
                response.status_code,
            )
            return False
        return True
