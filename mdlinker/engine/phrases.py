"""Candidate phrase extraction from markdown content."""

from __future__ import annotations

import re
from typing import Dict, List

from .config import EngineConfig, load_config

# Sentences end at terminators; line breaks also end a sentence since links
# are never inserted across lines.
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+|\n+")
MARKDOWN_LINK_RE = re.compile(r"!?\[[^\]\n]*\]\([^)\n]*\)")
RAW_URL_RE = re.compile(r"https?://[^\s)]+")
_NUMERIC_RE = re.compile(r"^[0-9-]+$")

# Trimmed from both ends of a word so phrases stay literal substrings.
_WORD_TRIM = ",;:\"'*_`~<>{}«»“”‘’"


class PhraseExtractor:
    """Produce single-word and n-gram phrases worth matching against keywords."""

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or load_config(None)
        self.ngram_min = max(2, int(self.config.get("ngram_min", 2)))
        self.ngram_max = max(self.ngram_min, int(self.config.get("ngram_max", 5)))
        self.single_word_policy = self.config.get("single_word_policy", "length")
        self.single_word_min_chars = int(self.config.get("single_word_min_chars", 4))

    def extract(self, content: str) -> List[str]:
        """Return de-duplicated phrases in the order they first appear."""

        phrases: Dict[str, None] = {}
        for sentence in split_sentences(strip_links(content)):
            words = sentence_words(sentence)
            for i, word in enumerate(words):
                for size in range(self.ngram_min, min(self.ngram_max, len(words) - i) + 1):
                    phrase = " ".join(words[i:i + size])
                    if len(phrase) >= self.config.min_phrase_chars(size):
                        phrases.setdefault(phrase, None)
                if self._single_word_ok(word):
                    phrases.setdefault(word, None)
        return list(phrases)

    def _single_word_ok(self, word: str) -> bool:
        if len(word) < self.single_word_min_chars or "." in word:
            return False
        if self.single_word_policy == "capitalized":
            return word[:1].isupper()
        return True


def strip_links(text: str) -> str:
    """Blank out markdown links and raw URLs so they never yield phrases."""

    # Links go first so the ``(url)`` part is removed with its label.
    text = MARKDOWN_LINK_RE.sub(" ", text)
    return RAW_URL_RE.sub(" ", text)


def split_sentences(content: str) -> List[str]:
    """Split into sentences, dropping empty pieces."""

    sentences = []
    for piece in _SENTENCE_SPLIT_RE.split(content):
        piece = piece.strip()
        if piece:
            sentences.append(piece)
    return sentences


def sentence_words(sentence: str) -> List[str]:
    """Return the usable words of a sentence."""

    words = []
    for raw in sentence.split():
        if not _keep_word(raw):
            continue
        word = raw.strip(_WORD_TRIM)
        if len(word) > 1 and not _NUMERIC_RE.match(word):
            words.append(word)
    return words


def _keep_word(word: str) -> bool:
    if len(word) <= 1:
        return False
    if word.startswith(("[", "(")) or word.endswith(("]", ")")):
        return False
    if "/" in word:
        return False
    return not _NUMERIC_RE.match(word)
