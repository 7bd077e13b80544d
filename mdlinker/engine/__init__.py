"""Keyword extraction and markdown link insertion engine."""

from .config import EngineConfig, load_config
from .errors import EngineInternalError, FetchError, IndexEmptyWarning, MdlinkerError, ParseError
from .index import link_content, process_content
from .insertion import LinkInserter
from .matcher import KeywordMatcher
from .phrases import PhraseExtractor
from .similarity import SimilarityScorer
from .sitemap import SitemapIndexer
from .text import StemCache
from .types import KeywordEntry, LinkRecord, LinkStats, MatchCandidate, ProcessResult, Span

__all__ = [
    "EngineConfig",
    "EngineInternalError",
    "FetchError",
    "IndexEmptyWarning",
    "KeywordEntry",
    "KeywordMatcher",
    "LinkInserter",
    "LinkRecord",
    "LinkStats",
    "MatchCandidate",
    "MdlinkerError",
    "ParseError",
    "PhraseExtractor",
    "ProcessResult",
    "SimilarityScorer",
    "SitemapIndexer",
    "Span",
    "StemCache",
    "link_content",
    "load_config",
    "process_content",
]
