"""Best-keyword selection for content phrases."""

from __future__ import annotations

from typing import List, Mapping, Tuple

from .config import EngineConfig, load_config
from .similarity import SimilarityScorer
from .text import normalize_phrase, tokenize
from .types import KeywordEntry, MatchCandidate


class KeywordMatcher:
    """Find the best keyword in an index for a phrase.

    Single-word keywords only ever match the identical word unless the
    ``single_word_matching`` option is ``"semantic"``; multi-word keywords are
    compared by stemmed Jaccard similarity and must reach the acceptance
    threshold.
    """

    def __init__(
        self,
        index: Mapping[str, KeywordEntry],
        scorer: SimilarityScorer | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.config = config or load_config(None)
        self.scorer = scorer or SimilarityScorer()
        self.threshold = self.config.acceptance_threshold
        self.stopwords = self.config.stopwords
        semantic_singles = self.config.get("single_word_matching", "exact") == "semantic"

        self._exact = {normalize_phrase(key): entry for key, entry in index.items()}
        self._scored: List[Tuple[KeywordEntry, frozenset[str]]] = [
            (entry, self.scorer.stems(entry.keyword))
            for entry in index.values()
            if semantic_singles or not entry.is_single_word
        ]

    def best_match(self, phrase: str) -> MatchCandidate | None:
        """Return the best accepted match for ``phrase`` or ``None``."""

        normalized = normalize_phrase(phrase)
        words = [word for word in tokenize(normalized) if word not in self.stopwords and len(word) > 1]
        if not words:
            return None

        exact = self._exact.get(normalized)
        if exact is not None:
            return MatchCandidate(phrase=phrase, keyword=exact.keyword, url=exact.url, score=1.0)

        phrase_stems = self.scorer.stems(normalized)
        best: Tuple[KeywordEntry, float] | None = None
        for entry, keyword_stems in self._scored:
            score = self.scorer.score_stems(phrase_stems, keyword_stems)
            if best is None or score > best[1]:
                best = (entry, score)

        if best is None or best[1] < self.threshold:
            return None
        entry, score = best
        return MatchCandidate(phrase=phrase, keyword=entry.keyword, url=entry.url, score=score)

    def keywords_for_url(self, url: str) -> List[str]:
        return [entry.keyword for entry in self._exact.values() if entry.url == url]
