"""Discover section definitions backed by broker endpoints."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DiscoverSectionDefinition:
    """Describes a fixed discover lane fed by a broker discovery endpoint."""

    key: str
    title: str
    endpoint: str


DISCOVER_SECTIONS: tuple[DiscoverSectionDefinition, ...] = (
    DiscoverSectionDefinition(
        key="discover",
        title="Discover",
        endpoint="/api/v1/discover/trending",
    ),
    DiscoverSectionDefinition(
        key="discover-movies",
        title="Discover Movies",
        endpoint="/api/v1/discover/movies",
    ),
    DiscoverSectionDefinition(
        key="discover-tv",
        title="Discover TV",
        endpoint="/api/v1/discover/tv",
    ),
    DiscoverSectionDefinition(
        key="upcoming-movies",
        title="Upcoming Movies",
        endpoint="/api/v1/discover/movies/upcoming",
    ),
    DiscoverSectionDefinition(
        key="upcoming-tv",
        title="Upcoming Shows",
        endpoint="/api/v1/discover/tv/upcoming",
    ),
)

DISCOVER_SECTION_MAP: dict[str, DiscoverSectionDefinition] = {
    definition.key: definition for definition in DISCOVER_SECTIONS
}
