"""Indirection that turns remote artwork URLs into locally servable ones."""

from __future__ import annotations

import logging
from typing import Protocol
from urllib.parse import quote

logger = logging.getLogger(__name__)


class ImageCache(Protocol):
    """Contract of the image cache collaborator."""

    def get_cached_url(self, source_url: str) -> str: ...


class PassthroughImageCache:
    """Cache used when no image proxy is configured; URLs are served as-is."""

    def get_cached_url(self, source_url: str) -> str:
        return source_url


class ProxyImageCache:
    """Rewrite artwork URLs so they are fetched through an image proxy."""

    def __init__(self, proxy_base_url: str) -> None:
        normalized = (proxy_base_url or "").strip().rstrip("/")
        if not normalized:
            raise ValueError("An image proxy URL is required for ProxyImageCache")
        self._proxy_base_url = normalized

    def get_cached_url(self, source_url: str) -> str:
        return f"{self._proxy_base_url}?url={quote(source_url, safe='')}"


class ImageReferenceResolver:
    """Resolve source artwork URLs through the configured cache collaborator."""

    def __init__(self, cache: ImageCache | None = None) -> None:
        self._cache: ImageCache = cache or PassthroughImageCache()

    def resolve(self, source_url: str) -> str:
        """Return a cached URL for ``source_url`` or ``""`` when unavailable."""

        if not source_url:
            return ""
        try:
            return self._cache.get_cached_url(source_url) or ""
        except Exception:
            logger.exception("Image cache lookup failed for %s", source_url)
            return ""


def build_image_resolver(proxy_base_url: str | None) -> ImageReferenceResolver:
    """Return a resolver backed by the proxy cache when one is configured."""

    if proxy_base_url:
        return ImageReferenceResolver(ProxyImageCache(proxy_base_url))
    return ImageReferenceResolver()
