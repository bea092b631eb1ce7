"""Tests for the artwork URL indirection."""

from __future__ import annotations

import pytest

from app.services.image_cache import (
    ImageReferenceResolver,
    PassthroughImageCache,
    ProxyImageCache,
    build_image_resolver,
)


class RecordingCache:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def get_cached_url(self, source_url: str) -> str:
        self.calls.append(source_url)
        return f"/cache/{len(self.calls)}"


def test_empty_url_skips_collaborator() -> None:
    cache = RecordingCache()
    resolver = ImageReferenceResolver(cache)

    assert resolver.resolve("") == ""
    assert cache.calls == []


def test_resolver_delegates_to_cache() -> None:
    cache = RecordingCache()
    resolver = ImageReferenceResolver(cache)

    assert resolver.resolve("https://image.tmdb.org/t/p/a.jpg") == "/cache/1"
    assert cache.calls == ["https://image.tmdb.org/t/p/a.jpg"]


def test_resolver_swallows_cache_failures() -> None:
    class BrokenCache:
        def get_cached_url(self, source_url: str) -> str:
            raise RuntimeError("boom")

    assert ImageReferenceResolver(BrokenCache()).resolve("https://x/y.jpg") == ""


def test_passthrough_cache_returns_source() -> None:
    assert PassthroughImageCache().get_cached_url("https://x/y.jpg") == "https://x/y.jpg"


def test_proxy_cache_rewrites_urls() -> None:
    cache = ProxyImageCache("https://media.example.com/images/")

    assert (
        cache.get_cached_url("https://image.tmdb.org/t/p/w600/a b.jpg")
        == "https://media.example.com/images?url=https%3A%2F%2Fimage.tmdb.org%2Ft%2Fp%2Fw600%2Fa%20b.jpg"
    )


def test_proxy_cache_requires_url() -> None:
    with pytest.raises(ValueError):
        ProxyImageCache("  ")


def test_build_image_resolver_selects_cache() -> None:
    proxied = build_image_resolver("https://media.example.com/img")
    plain = build_image_resolver(None)

    assert proxied.resolve("https://x/y.jpg").startswith("https://media.example.com/img?url=")
    assert plain.resolve("https://x/y.jpg") == "https://x/y.jpg"
