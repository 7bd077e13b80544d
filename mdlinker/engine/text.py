"""Shared text utilities for the linking engine."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List

from nltk.stem import PorterStemmer

_TOKEN_RE = re.compile(r"[^\W_]+")
_WHITESPACE_RE = re.compile(r"\s+")


def tokenize(text: str) -> List[str]:
    """Return lower-cased word tokens from the provided text."""

    return [token.lower() for token in _TOKEN_RE.findall(text)]


def normalize_phrase(text: str) -> str:
    """Return a lowercase, single-space version of ``text`` for lookups."""

    return _WHITESPACE_RE.sub(" ", text.strip().lower())


def is_word_char(char: str) -> bool:
    return char.isalnum() or char == "_"


class StemCache:
    """Memoized Porter stemming keyed by the raw lower-cased word.

    Entries are never evicted. Concurrent writers can at worst stem the same
    word twice; the stored value is always the same.
    """

    def __init__(self, stemmer: PorterStemmer | None = None) -> None:
        self._stemmer = stemmer or PorterStemmer()
        self._stems: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._stems)

    def __contains__(self, word: object) -> bool:
        return word in self._stems

    def stem(self, word: str) -> str:
        cached = self._stems.get(word)
        if cached is None:
            cached = self._stemmer.stem(word)
            self._stems[word] = cached
        return cached

    def stem_tokens(self, text: str) -> frozenset[str]:
        return frozenset(self.stem(token) for token in tokenize(text))


def jaccard(set_a: Iterable[str], set_b: Iterable[str]) -> float:
    """Return Jaccard similarity for two iterables."""

    set_a = set(set_a)
    set_b = set(set_b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)
