"""Typed data structures used by the linking engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Set


@dataclass(frozen=True)
class KeywordEntry:
    """A keyword derived from a sitemap URL and the page it points to."""

    keyword: str
    url: str
    is_single_word: bool


@dataclass(frozen=True)
class MatchCandidate:
    """Best keyword found for a content phrase."""

    phrase: str
    keyword: str
    url: str
    score: float


@dataclass(frozen=True)
class Span:
    """Half-open ``[start, end)`` character range inside a line."""

    start: int
    end: int

    def overlaps(self, other: "Span") -> bool:
        return self.start < other.end and other.start < self.end

    def shifted(self, delta: int) -> "Span":
        return Span(self.start + delta, self.end + delta)


@dataclass(frozen=True)
class LinkRecord:
    """Details about a link that was inserted into the content."""

    phrase: str
    keyword: str
    url: str
    score: float
    context: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phrase": self.phrase,
            "matchedWith": self.keyword,
            "score": self.score,
            "url": self.url,
            "context": self.context,
        }


@dataclass
class LinkStats:
    """Aggregate counters for a linking run."""

    total_matches: int = 0
    unique_urls: Set[str] = field(default_factory=set)

    def record(self, url: str) -> None:
        self.total_matches += 1
        self.unique_urls.add(url)

    def to_dict(self) -> Dict[str, int]:
        return {"totalMatches": self.total_matches, "uniqueUrls": len(self.unique_urls)}


@dataclass
class ProcessResult:
    """Outcome of a linking run as exposed to callers."""

    updated_content: str
    found_links: List[LinkRecord] = field(default_factory=list)
    stats: LinkStats = field(default_factory=LinkStats)

    @classmethod
    def unchanged(cls, content: str) -> "ProcessResult":
        return cls(updated_content=content)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "found_links": [record.to_dict() for record in self.found_links],
            "updated_content": self.updated_content,
            "stats": self.stats.to_dict(),
        }
