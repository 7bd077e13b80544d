"""Stemmed-token similarity between phrases and keywords."""

from __future__ import annotations

from .text import StemCache, jaccard


class SimilarityScorer:
    """Score two phrases by the Jaccard overlap of their stemmed tokens."""

    def __init__(self, stem_cache: StemCache | None = None) -> None:
        self.stem_cache = stem_cache if stem_cache is not None else StemCache()

    def stems(self, text: str) -> frozenset[str]:
        return self.stem_cache.stem_tokens(text)

    def score(self, a: str, b: str) -> float:
        """Return a similarity in ``[0, 1]``; 0.0 when neither side has tokens."""

        return self.score_stems(self.stems(a), self.stems(b))

    @staticmethod
    def score_stems(stems_a: frozenset[str], stems_b: frozenset[str]) -> float:
        return min(1.0, jaccard(stems_a, stems_b))
