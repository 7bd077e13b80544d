"""Coordinator for the linking pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Mapping

from .config import EngineConfig, load_config
from .errors import EngineInternalError
from .insertion import LinkInserter
from .matcher import KeywordMatcher
from .phrases import PhraseExtractor
from .similarity import SimilarityScorer
from .sitemap import Fetcher, SitemapIndexer
from .text import StemCache
from .types import KeywordEntry, MatchCandidate, ProcessResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineContext:
    """Components shared by the stages of one linking run."""

    config: EngineConfig
    extractor: PhraseExtractor
    matcher: KeywordMatcher
    inserter: LinkInserter


def build_pipeline(
    keyword_index: Mapping[str, KeywordEntry],
    config: EngineConfig | None = None,
    stem_cache: StemCache | None = None,
) -> PipelineContext:
    engine_config = config or load_config(None)
    scorer = SimilarityScorer(stem_cache)
    return PipelineContext(
        config=engine_config,
        extractor=PhraseExtractor(engine_config),
        matcher=KeywordMatcher(keyword_index, scorer, engine_config),
        inserter=LinkInserter(engine_config),
    )


def find_matches(content: str, pipe: PipelineContext) -> List[MatchCandidate]:
    """Return the accepted match for every phrase that has one."""

    matches = []
    try:
        for phrase in pipe.extractor.extract(content):
            match = pipe.matcher.best_match(phrase)
            if match is not None:
                matches.append(match)
    except Exception as exc:
        raise EngineInternalError(f"Phrase matching failed: {exc}") from exc
    return matches


def link_content(
    content: str,
    keyword_index: Mapping[str, KeywordEntry],
    config: EngineConfig | None = None,
    stem_cache: StemCache | None = None,
    *,
    raise_errors: bool = False,
) -> ProcessResult:
    """Insert links for ``keyword_index`` into ``content``.

    Failures in extraction or matching are logged and the original content
    is returned with no links, unless ``raise_errors`` is set, in which case
    :class:`EngineInternalError` propagates.
    """

    if not content or not keyword_index:
        return ProcessResult.unchanged(content)
    try:
        try:
            pipe = build_pipeline(keyword_index, config, stem_cache)
        except Exception as exc:
            raise EngineInternalError(f"Pipeline setup failed: {exc}") from exc
        matches = find_matches(content, pipe)
    except EngineInternalError:
        if raise_errors:
            raise
        logger.exception("Linking failed; returning content unchanged")
        return ProcessResult.unchanged(content)
    logger.debug("Found %d candidate matches for %d keywords", len(matches), len(keyword_index))
    return pipe.inserter.insert(content, matches, pipe.matcher)


def process_content(
    content: str,
    sitemap_url: str,
    config: EngineConfig | None = None,
    stem_cache: StemCache | None = None,
    fetch: Fetcher | None = None,
) -> ProcessResult:
    """Read the sitemap at ``sitemap_url`` and link ``content`` against it."""

    engine_config = config or load_config(None)
    try:
        keyword_index = SitemapIndexer(engine_config, fetch=fetch).index(sitemap_url)
    except Exception:
        logger.exception("Indexing %s failed; continuing without keywords", sitemap_url)
        keyword_index = {}
    result = link_content(content, keyword_index, engine_config, stem_cache)
    logger.info(
        "Processed %d characters against %s: %d links, %d unique URLs",
        len(content or ""),
        sitemap_url,
        result.stats.total_matches,
        len(result.stats.unique_urls),
    )
    return result
