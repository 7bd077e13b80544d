"""Link insertion, dedup and overlap tests."""

from __future__ import annotations

import re

from mdlinker.engine.index import link_content
from mdlinker.engine.insertion import LINK_RE, LinkInserter, locate
from mdlinker.engine.types import MatchCandidate, Span

from .conftest import make_index

PRICING = "https://example.com/pricing"
STRATEGIES = "https://example.com/blog/email-marketing-strategies"

ARTICLE = (
    "# Pricing guide\n"
    "\n"
    "Our pricing plans fit every team. Read the email marketing strategy overview before you start.\n"
    "\n"
    "Teams that follow email marketing strategies grow faster. Check the pricing page too.\n"
)


def _article_index():
    return make_index(PRICING, STRATEGIES, "https://example.com/guides/onboarding-checklist")


def test_single_word_keyword_is_linked_once(engine_config, stem_cache):
    index = make_index("https://example.com/pricing")

    result = link_content("Check out our pricing plans today.", index, engine_config, stem_cache)

    assert result.updated_content == f"Check out our [pricing]({PRICING}) plans today."
    assert result.stats.to_dict() == {"totalMatches": 1, "uniqueUrls": 1}
    assert [record.url for record in result.found_links] == [PRICING]
    assert result.found_links[0].context == "Check out our pricing plans today."


def test_existing_link_blocks_the_same_keyword(engine_config, stem_cache):
    content = "See [pricing](/old-pricing) for details and pricing info."

    result = link_content(content, make_index(PRICING), engine_config, stem_cache)

    assert result.updated_content == content
    assert result.found_links == []
    assert result.stats.to_dict() == {"totalMatches": 0, "uniqueUrls": 0}


def test_headers_are_left_untouched(engine_config, stem_cache):
    result = link_content(ARTICLE, _article_index(), engine_config, stem_cache)

    assert result.updated_content.splitlines()[0] == "# Pricing guide"
    assert result.updated_content.endswith("\n")
    assert result.updated_content.count("\n") == ARTICLE.count("\n")


def test_each_keyword_is_linked_at_most_once(engine_config, stem_cache):
    result = link_content(ARTICLE, _article_index(), engine_config, stem_cache)

    assert result.updated_content.count(f"]({PRICING})") == 1
    assert result.updated_content.count(f"]({STRATEGIES})") == 1
    assert result.stats.total_matches == 2
    assert result.stats.unique_urls == {PRICING, STRATEGIES}
    assert sorted(record.keyword for record in result.found_links) == ["email marketing strategies", "pricing"]


def test_rerunning_on_linked_output_adds_nothing(engine_config, stem_cache):
    index = _article_index()
    first = link_content(ARTICLE, index, engine_config, stem_cache)

    second = link_content(first.updated_content, index, engine_config, stem_cache)

    assert second.updated_content == first.updated_content
    assert second.found_links == []


def test_inserted_links_never_overlap(engine_config, stem_cache):
    result = link_content(ARTICLE, _article_index(), engine_config, stem_cache)

    spans = sorted(match.span() for match in LINK_RE.finditer(result.updated_content))
    assert len(spans) == 2
    for (_, end), (start, _) in zip(spans, spans[1:]):
        assert end <= start


def test_longer_phrases_win_over_their_parts(engine_config, stem_cache):
    index = make_index("https://shop.example/running-shoes", "https://shop.example/shoes")

    result = link_content("The best trail running shoes are light.", index, engine_config, stem_cache)

    assert result.updated_content == "The best trail [running shoes](https://shop.example/running-shoes) are light."
    assert result.stats.total_matches == 1


def test_bold_wrapper_is_preserved(engine_config, stem_cache):
    result = link_content("Try our **pricing** calculator.", make_index(PRICING), engine_config, stem_cache)

    assert result.updated_content == f"Try our **[pricing]({PRICING})** calculator."


def test_raw_urls_and_inline_code_are_skipped(engine_config, stem_cache):
    content = "Visit https://example.com/pricing or run `pricing` for pricing details."

    result = link_content(content, make_index(PRICING), engine_config, stem_cache)

    assert result.updated_content == (
        f"Visit https://example.com/pricing or run `pricing` for [pricing]({PRICING}) details."
    )


def test_fenced_code_blocks_are_left_untouched(engine_config, stem_cache):
    content = "```\npricing in code\n```\nOur pricing rocks.\n"

    result = link_content(content, make_index(PRICING), engine_config, stem_cache)

    assert result.updated_content == f"```\npricing in code\n```\nOur [pricing]({PRICING}) rocks.\n"


def test_words_inside_other_words_are_not_linked(engine_config, stem_cache):
    content = "Repricing happens. Our pricing is fair."

    result = link_content(content, make_index(PRICING), engine_config, stem_cache)

    assert result.updated_content == f"Repricing happens. Our [pricing]({PRICING}) is fair."


def test_url_dedup_allows_one_link_per_target(engine_config, stem_cache):
    index = make_index("https://example.com/pricing/enterprise-plans", segments="all")
    content = "Our pricing covers enterprise plans too."

    by_keyword = link_content(content, index, engine_config, stem_cache)
    engine_config.raw["dedup"] = "url"
    by_url = link_content(content, index, engine_config, stem_cache)

    assert by_keyword.stats.total_matches == 2
    assert by_url.stats.total_matches == 1
    assert "[enterprise plans](https://example.com/pricing/enterprise-plans)" in by_url.updated_content


def test_max_links_caps_insertions(engine_config, stem_cache):
    engine_config.raw["max_links"] = 1

    result = link_content(ARTICLE, _article_index(), engine_config, stem_cache)

    assert result.stats.total_matches == 1
    assert len(re.findall(r"\]\(https://", result.updated_content)) == 1


def test_line_endings_are_preserved(engine_config, stem_cache):
    content = "Our pricing is fair.\r\nNothing else.\r\n"

    result = link_content(content, make_index(PRICING), engine_config, stem_cache)

    assert result.updated_content == f"Our [pricing]({PRICING}) is fair.\r\nNothing else.\r\n"


def test_insertion_failure_leaves_content_unchanged(engine_config, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr("mdlinker.engine.insertion.locate", boom)
    match = MatchCandidate(phrase="pricing", keyword="pricing", url=PRICING, score=1.0)

    result = LinkInserter(engine_config).insert("Our pricing is fair.", [match])

    assert result.updated_content == "Our pricing is fair."
    assert result.found_links == []
    assert result.stats.to_dict() == {"totalMatches": 0, "uniqueUrls": 0}


def test_locate_skips_occupied_and_partial_words():
    text = "pricing, repricing and pricing"

    assert locate(text, "pricing", [Span(0, 7)]) == Span(23, 30)
    assert locate(text, "pricing", []) == Span(0, 7)
    assert locate(text, "missing", []) is None


def test_link_cap_counts_links_already_in_the_content(engine_config, stem_cache):
    engine_config.raw["max_links"] = 1
    index = make_index(PRICING, STRATEGIES)
    content = "Our pricing plans fit.\nRead about email marketing strategies.\n"

    first = link_content(content, index, engine_config, stem_cache)
    second = link_content(first.updated_content, index, engine_config, stem_cache)

    assert first.stats.total_matches == 1
    assert second.updated_content == first.updated_content
    assert second.found_links == []


def test_exact_phrase_beats_a_padded_superset(engine_config, stem_cache):
    result = link_content("Read about email marketing strategies.", make_index(STRATEGIES), engine_config, stem_cache)

    assert result.updated_content == f"Read about [email marketing strategies]({STRATEGIES})."
    assert [record.score for record in result.found_links] == [1.0]


def test_weaker_phrase_is_used_when_the_best_one_is_absent(engine_config, stem_cache):
    content = "# Email marketing strategies\n\nRead the email marketing strategy overview.\n"

    result = link_content(content, make_index(STRATEGIES), engine_config, stem_cache)

    assert result.updated_content.splitlines()[0] == "# Email marketing strategies"
    assert result.updated_content.splitlines()[2] == f"Read the [email marketing strategy]({STRATEGIES}) overview."
    assert result.stats.total_matches == 1


def test_underscore_emphasis_is_preserved(engine_config, stem_cache):
    index = make_index(PRICING)

    bold = link_content("Try our __pricing__ calculator.", index, engine_config, stem_cache)
    italic = link_content("Try our _pricing_ calculator.", index, engine_config, stem_cache)
    joined = link_content("Call get_pricing now.", index, engine_config, stem_cache)

    assert bold.updated_content == f"Try our __[pricing]({PRICING})__ calculator."
    assert italic.updated_content == f"Try our _[pricing]({PRICING})_ calculator."
    assert joined.updated_content == "Call get_pricing now."


def test_links_inside_code_fences_do_not_claim_keywords(engine_config, stem_cache):
    content = f"```\n[pricing]({PRICING})\n```\nOur pricing rocks.\n"

    result = link_content(content, make_index(PRICING), engine_config, stem_cache)

    assert result.updated_content == f"```\n[pricing]({PRICING})\n```\nOur [pricing]({PRICING}) rocks.\n"
    assert result.stats.total_matches == 1
