"""Service functions used by the views to run the linking engine.

They own the process-wide stem cache and the engine configuration loaded
from ``settings.MDLINKER_ENGINE_CONFIG``, so that every request shares
the same memoized stems while keeping its own keyword index and results.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Mapping

from django.conf import settings

from .engine import EngineConfig, ProcessResult, StemCache, load_config
from .engine import process_content as run_engine

# Shared by reference with every scorer; only ever grows.
STEM_CACHE = StemCache()


@lru_cache(maxsize=4)
def _base_config(path: str | None) -> EngineConfig:
    return load_config(path)


def get_engine_config(options: Mapping[str, Any] | None = None) -> EngineConfig:
    """Return the configured engine settings with request ``options`` on top."""

    path = getattr(settings, "MDLINKER_ENGINE_CONFIG", None)
    base = _base_config(str(path) if path else None)
    return base.with_overrides(options)


def process_content(
    content: str,
    sitemap_url: str,
    options: Mapping[str, Any] | None = None,
) -> ProcessResult:
    """Link ``content`` against the keywords found in ``sitemap_url``.

    Fetch, parse and pipeline failures never raise here: they resolve to a
    result carrying the unchanged content and zeroed stats.
    """

    return run_engine(content, sitemap_url, get_engine_config(options), stem_cache=STEM_CACHE)
