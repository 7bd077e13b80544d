"""Similarity scoring and keyword matching tests."""

from __future__ import annotations

import pytest

from mdlinker.engine.matcher import KeywordMatcher
from mdlinker.engine.similarity import SimilarityScorer

from .conftest import make_index


def test_similarity_ignores_inflection(stem_cache):
    scorer = SimilarityScorer(stem_cache)

    assert scorer.score("email marketing strategies", "Email Marketing Strategy") == 1.0
    assert scorer.score("running shoes", "running shoe") == 1.0


def test_similarity_is_jaccard_over_stems(stem_cache):
    scorer = SimilarityScorer(stem_cache)

    assert scorer.score("running shoes", "trail running shoes") == pytest.approx(2 / 3)
    assert scorer.score("trail running shoes", "running shoes") == pytest.approx(2 / 3)
    assert scorer.score("pricing", "onboarding checklist") == 0.0


def test_similarity_of_empty_inputs_is_zero(stem_cache):
    scorer = SimilarityScorer(stem_cache)

    assert scorer.score("", "") == 0.0
    assert scorer.score("!!", "--") == 0.0


def test_stem_cache_is_shared_and_does_not_change_results(stem_cache):
    warm = SimilarityScorer(stem_cache)
    first = warm.score("running shoes", "trail running shoes")
    size = len(stem_cache)

    assert "running" in stem_cache
    assert warm.score("running shoes", "trail running shoes") == first
    assert len(stem_cache) == size
    assert SimilarityScorer().score("running shoes", "trail running shoes") == first


def test_single_word_keywords_require_exact_match(engine_config, stem_cache):
    index = make_index("https://example.com/price")
    matcher = KeywordMatcher(index, SimilarityScorer(stem_cache), engine_config)

    assert matcher.best_match("prices") is None
    assert matcher.best_match("pricing") is None
    match = matcher.best_match("Price")
    assert match is not None
    assert match.score == 1.0
    assert match.url == "https://example.com/price"


def test_semantic_single_word_mode_allows_stemmed_matches(engine_config, stem_cache):
    engine_config.raw["single_word_matching"] = "semantic"
    index = make_index("https://example.com/shoe")
    matcher = KeywordMatcher(index, SimilarityScorer(stem_cache), engine_config)

    match = matcher.best_match("shoes")

    assert match is not None
    assert match.keyword == "shoe"


def test_multi_word_keywords_need_the_threshold(engine_config, stem_cache):
    index = make_index("https://shop.example/trail-running-shoes")
    scorer = SimilarityScorer(stem_cache)

    assert KeywordMatcher(index, scorer, engine_config).best_match("running shoes") is None

    engine_config.raw["acceptance_threshold"] = 0.6
    match = KeywordMatcher(index, scorer, engine_config).best_match("running shoes")
    assert match is not None
    assert match.score == pytest.approx(2 / 3)


def test_ties_keep_the_first_keyword(engine_config, stem_cache):
    engine_config.raw["acceptance_threshold"] = 0.6
    index = make_index(
        "https://shop.example/running-shoes-guide",
        "https://shop.example/running-shoes-review",
    )

    match = KeywordMatcher(index, SimilarityScorer(stem_cache), engine_config).best_match("running shoes")

    assert match is not None
    assert match.keyword == "running shoes guide"


def test_exact_keyword_short_circuits(engine_config, stem_cache):
    index = make_index(
        "https://example.com/blog/email-marketing-strategy",
        "https://example.com/blog/email-marketing-strategies",
    )

    match = KeywordMatcher(index, SimilarityScorer(stem_cache), engine_config).best_match("email marketing strategies")

    assert match is not None
    assert match.url == "https://example.com/blog/email-marketing-strategies"


def test_stopword_only_phrases_never_match(engine_config, stem_cache):
    index = make_index("https://example.com/of-the")

    assert KeywordMatcher(index, SimilarityScorer(stem_cache), engine_config).best_match("of the") is None
