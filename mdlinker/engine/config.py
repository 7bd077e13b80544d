"""Configuration helpers for the linking engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

import yaml

_STOPWORDS: List[str] = [
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "has", "he",
    "in", "is", "it", "its", "of", "on", "or", "that", "the", "to", "was", "were",
    "will", "with",
]


@dataclass(frozen=True)
class EngineConfig:
    """Typed wrapper around the engine configuration dictionary.

    ``explicit`` holds the keys a caller set directly (in YAML or as
    overrides); presets never replace them.
    """

    raw: Dict[str, Any] = field(default_factory=dict)
    explicit: frozenset[str] = field(default_factory=frozenset)

    def get(self, key: str, default: Any = None) -> Any:
        return self.raw.get(key, default)

    @property
    def acceptance_threshold(self) -> float:
        return float(self.raw.get("acceptance_threshold", 0.7))

    @property
    def stopwords(self) -> frozenset[str]:
        return frozenset(word.lower() for word in self.raw.get("stopwords", []))

    def min_phrase_chars(self, size: int) -> int:
        by_size = self.raw.get("min_phrase_chars_by_size") or {}
        value = by_size.get(size, by_size.get(str(size)))
        if value is None:
            value = self.raw.get("min_phrase_chars", 3)
        return int(value)

    def with_overrides(self, overrides: Mapping[str, Any] | None) -> "EngineConfig":
        """Return a new config with ``overrides`` merged on top."""

        if not overrides:
            return self
        explicit = self.explicit | frozenset(overrides)
        data = _copy(self.raw)
        merge_into(data, dict(overrides))
        if "preset" in overrides:
            data = _apply_preset(data, explicit - {"preset"})
        return EngineConfig(data, explicit)


DEFAULTS: Dict[str, Any] = {
    "preset": None,
    "acceptance_threshold": 0.7,
    "ngram_min": 2,
    "ngram_max": 5,
    "min_phrase_chars": 3,
    "min_phrase_chars_by_size": {},
    "single_word_policy": "length",
    "single_word_min_chars": 4,
    "single_word_matching": "exact",
    "dedup": "keyword",
    "keyword_segments": "last",
    "fetch_timeout": 20,
    "max_sitemap_depth": 5,
    "max_links": 0,
    "context_window": 45,
    "stopwords": list(_STOPWORDS),
}

PRESETS: Dict[str, Dict[str, Any]] = {
    "semantic": {
        "acceptance_threshold": 0.7,
        "ngram_min": 2,
        "ngram_max": 5,
        "single_word_policy": "length",
        "dedup": "keyword",
    },
    "strict": {
        "acceptance_threshold": 0.8,
        "ngram_min": 2,
        "ngram_max": 3,
        "single_word_policy": "capitalized",
        "dedup": "url",
    },
}


def load_config(path: str | Path | None = None) -> EngineConfig:
    """Load configuration from YAML, merging with defaults."""

    data = _copy(DEFAULTS)
    user: Dict[str, Any] = {}

    if path is not None and Path(path).exists():
        with Path(path).open("r", encoding="utf-8") as stream:
            user = yaml.safe_load(stream) or {}
        merge_into(data, user)

    return EngineConfig(_apply_preset(data, user), frozenset(user))


def merge_into(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Recursively merge override into base dict."""

    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merge_into(base[key], value)
        else:
            base[key] = value


def _apply_preset(data: Dict[str, Any], explicit: Iterable[str]) -> Dict[str, Any]:
    # Preset values fill in keys the caller did not set explicitly.
    name = data.get("preset")
    if not name:
        return data
    if name not in PRESETS:
        raise ValueError(f"Unknown engine preset: {name!r}")
    explicit = set(explicit)
    for key, value in PRESETS[name].items():
        if key not in explicit:
            data[key] = value
    return data


def _copy(data: Mapping[str, Any]) -> Dict[str, Any]:
    copied: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            copied[key] = _copy(value)
        elif isinstance(value, list):
            copied[key] = list(value)
        else:
            copied[key] = value
    return copied
