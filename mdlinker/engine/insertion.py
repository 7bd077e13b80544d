"""Insertion of markdown links into content.

Content is rewritten line by line. Every line keeps a list of occupied
spans (existing links, raw URLs, inline code and links inserted so far) and
a new link is only placed over text that touches none of them. Header lines
and fenced code blocks are copied through untouched.

The best-scoring phrase for each target is tried on every line before any
weaker phrase for the same target, so a padded n-gram never wins over the
exact keyword when both occur.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Set, Tuple

from .config import EngineConfig, load_config
from .matcher import KeywordMatcher
from .text import is_word_char, normalize_phrase
from .types import LinkRecord, LinkStats, MatchCandidate, ProcessResult, Span

logger = logging.getLogger(__name__)

LINK_RE = re.compile(r"!?\[(?P<label>[^\]\n]*)\]\((?P<target>[^)\n]*)\)")
HTML_LINK_RE = re.compile(
    r"<a\s[^>\n]*?href=[\"'](?P<target>[^\"']*)[\"'][^>\n]*>(?P<label>.*?)</a>",
    re.IGNORECASE,
)
_URL_RE = re.compile(r"https?://[^\s)>\]]+")
_INLINE_CODE_RE = re.compile(r"`[^`\n]+`")
_FENCE_MARKERS = ("```", "~~~")
_HEADER_MARKER = "#"


@dataclass
class _RunState:
    """Dedup bookkeeping shared by every line of a single run."""

    linked_keys: Set[str] = field(default_factory=set)
    used_urls: Set[str] = field(default_factory=set)
    existing_links: int = 0
    records: List[LinkRecord] = field(default_factory=list)
    stats: LinkStats = field(default_factory=LinkStats)


class LinkInserter:
    """Rewrite content with markdown links for accepted matches."""

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or load_config(None)
        self.one_per_url = self.config.get("dedup", "keyword") == "url"
        self.max_links = int(self.config.get("max_links", 0) or 0)
        self.context_window = int(self.config.get("context_window", 45))

    def insert(
        self,
        content: str,
        matches: Sequence[MatchCandidate],
        matcher: KeywordMatcher | None = None,
    ) -> ProcessResult:
        """Return the rewritten content with its link records and stats.

        ``matcher`` lets existing links claim the keywords they already cover.
        Any failure leaves the content untouched.
        """

        if not content or not matches:
            return ProcessResult.unchanged(content)
        try:
            return self._insert(content, matches, matcher)
        except Exception:
            logger.exception("Link insertion failed; returning content unchanged")
            return ProcessResult.unchanged(content)

    def _insert(
        self,
        content: str,
        matches: Sequence[MatchCandidate],
        matcher: KeywordMatcher | None,
    ) -> ProcessResult:
        lines = content.splitlines(keepends=True)
        state = _RunState()
        bodies: Dict[int, str] = {}
        occupied: Dict[int, List[Span]] = {}
        in_fence = False
        for number, line in enumerate(lines):
            body, _ = _split_ending(line)
            stripped = body.strip()
            if stripped.startswith(_FENCE_MARKERS):
                in_fence = not in_fence
                continue
            if in_fence:
                continue
            for label, target in _existing_links(body):
                state.existing_links += 1
                self._claim_existing(label, target, state, matcher)
            if stripped.startswith(_HEADER_MARKER) or not stripped:
                continue
            bodies[number] = body
            occupied[number] = _occupied_spans(body)

        for candidates in best_first(matches, by_url=self.one_per_url):
            for number, body in bodies.items():
                bodies[number] = self._link_line(body, occupied[number], candidates, state)

        output: List[str] = []
        for number, line in enumerate(lines):
            if number in bodies:
                output.append(bodies[number] + _split_ending(line)[1])
            else:
                output.append(line)
        logger.debug("Inserted %d links into %d lines", state.stats.total_matches, len(lines))
        return ProcessResult(updated_content="".join(output), found_links=state.records, stats=state.stats)

    def _claim_existing(
        self,
        label: str,
        target: str,
        state: _RunState,
        matcher: KeywordMatcher | None,
    ) -> None:
        key = normalize_phrase(label)
        if key:
            state.linked_keys.add(key)
        if target:
            state.used_urls.add(target)
        if matcher is None:
            return
        if key:
            covered = matcher.best_match(label)
            if covered is not None:
                state.linked_keys.add(covered.keyword.lower())
        if target:
            state.linked_keys.update(keyword.lower() for keyword in matcher.keywords_for_url(target))

    def _cap_reached(self, state: _RunState) -> bool:
        # Links already in the content count towards the cap.
        return bool(self.max_links) and state.existing_links + state.stats.total_matches >= self.max_links

    def _link_line(
        self,
        body: str,
        spans: List[Span],
        candidates: Sequence[MatchCandidate],
        state: _RunState,
    ) -> str:
        """Link ``candidates`` into ``body``; ``spans`` is updated in place."""

        for match in candidates:
            if self._cap_reached(state):
                break
            key = match.keyword.lower()
            if key in state.linked_keys:
                continue
            if self.one_per_url and match.url in state.used_urls:
                continue
            span = locate(body, match.phrase, spans)
            if span is None:
                continue

            text = body[span.start:span.end]
            replacement = f"[{text}]({match.url})"
            context = _context_snippet(body, span, self.context_window)
            body = body[:span.start] + replacement + body[span.end:]

            delta = len(replacement) - len(text)
            spans[:] = [s.shifted(delta) if s.start >= span.end else s for s in spans]
            spans.append(Span(span.start, span.start + len(replacement)))

            state.linked_keys.add(key)
            state.used_urls.add(match.url)
            state.stats.record(match.url)
            state.records.append(
                LinkRecord(phrase=text, keyword=match.keyword, url=match.url, score=match.score, context=context)
            )
        return body


def order_candidates(matches: Sequence[MatchCandidate]) -> List[MatchCandidate]:
    """Longest phrases first, then higher scores, then original order."""

    indexed = list(enumerate(matches))
    indexed.sort(key=lambda item: (-len(item[1].phrase.split()), -len(item[1].phrase), -item[1].score, item[0]))
    return [match for _, match in indexed]


def best_first(matches: Sequence[MatchCandidate], by_url: bool = False) -> List[List[MatchCandidate]]:
    """Group matches into rounds holding at most one phrase per keyword (or URL).

    Each round holds the best remaining phrase for every target, so a weaker
    phrase is only tried after every stronger one for its target. Among
    phrases with the same score the longest one goes first, and each round
    keeps the longest-first order.
    """

    remaining = order_candidates(matches)
    rounds: List[List[MatchCandidate]] = []
    while remaining:
        best: Dict[str, int] = {}
        for position, match in enumerate(remaining):
            target = match.url if by_url else match.keyword.lower()
            current = best.get(target)
            if current is None or match.score > remaining[current].score:
                best[target] = position
        chosen = set(best.values())
        rounds.append([match for position, match in enumerate(remaining) if position in chosen])
        remaining = [match for position, match in enumerate(remaining) if position not in chosen]
    return rounds


def locate(text: str, phrase: str, occupied: Sequence[Span]) -> Span | None:
    """Return the first word-bounded occurrence of ``phrase`` clear of ``occupied``."""

    if not phrase:
        return None
    start = text.find(phrase)
    while start != -1:
        candidate = Span(start, start + len(phrase))
        if _word_bounded(text, candidate) and not any(candidate.overlaps(span) for span in occupied):
            return candidate
        start = text.find(phrase, start + 1)
    return None


def _word_bounded(text: str, span: Span) -> bool:
    # Underscore runs at the edges are emphasis unless they join two words.
    left = span.start
    while left > 0 and text[left - 1] == "_":
        left -= 1
    right = span.end
    while right < len(text) and text[right] == "_":
        right += 1
    if left > 0 and is_word_char(text[left - 1]):
        return False
    if right < len(text) and is_word_char(text[right]):
        return False
    return True


def _existing_links(line: str) -> List[Tuple[str, str]]:
    links = []
    for regex in (LINK_RE, HTML_LINK_RE):
        for match in regex.finditer(line):
            target = match.group("target").strip()
            target = target.split()[0] if target else ""
            links.append((match.group("label"), target))
    return links


def _occupied_spans(line: str) -> List[Span]:
    """Return the merged protected ranges of ``line``."""

    raw: List[Span] = []
    for regex in (LINK_RE, HTML_LINK_RE, _URL_RE, _INLINE_CODE_RE):
        raw.extend(Span(*match.span()) for match in regex.finditer(line))
    return _merge(raw)


def _merge(spans: List[Span]) -> List[Span]:
    merged: List[Span] = []
    for span in sorted(spans, key=lambda s: (s.start, s.end)):
        if merged and span.start < merged[-1].end:
            last = merged[-1]
            merged[-1] = Span(last.start, max(last.end, span.end))
        else:
            merged.append(span)
    return merged


def _split_ending(line: str) -> Tuple[str, str]:
    body = line.rstrip("\r\n")
    return body, line[len(body):]


def _context_snippet(text: str, span: Span, window: int) -> str:
    """Return a trimmed snippet of ``text`` surrounding the span."""

    start = max(0, span.start - window)
    end = min(len(text), span.end + window)
    return re.sub(r"\s+", " ", text[start:end].strip())
