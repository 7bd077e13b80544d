"""Shared fixtures for engine tests."""

from __future__ import annotations

from typing import Dict, List

import pytest

from mdlinker.engine.config import load_config
from mdlinker.engine.errors import FetchError
from mdlinker.engine.sitemap import build_keyword_index
from mdlinker.engine.text import StemCache

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


@pytest.fixture()
def engine_config():
    """Provide a fresh copy of the default engine configuration."""

    return load_config(None)


@pytest.fixture()
def stem_cache():
    return StemCache()


def make_index(*urls: str, segments: str = "last"):
    return build_keyword_index(list(urls), segments)


def urlset(*urls: str) -> str:
    entries = "".join(f"<url><loc>{url}</loc></url>" for url in urls)
    return f'<?xml version="1.0" encoding="UTF-8"?><urlset xmlns="{SITEMAP_NS}">{entries}</urlset>'


def sitemapindex(*urls: str) -> str:
    entries = "".join(f"<sitemap><loc>{url}</loc></sitemap>" for url in urls)
    return f'<?xml version="1.0" encoding="UTF-8"?><sitemapindex xmlns="{SITEMAP_NS}">{entries}</sitemapindex>'


class FakeSitemaps:
    """In-memory stand-in for the network: unknown URLs fail like a 404."""

    def __init__(self, documents: Dict[str, str]) -> None:
        self.documents = documents
        self.calls: List[str] = []

    def __call__(self, url: str) -> str:
        self.calls.append(url)
        if url not in self.documents:
            raise FetchError(url, "HTTP 404")
        return self.documents[url]
