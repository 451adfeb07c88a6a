"""Heuristic text analysis.

Counts, keyword frequencies and readability scores are computed from plain
word/sentence splitting; no language models or dictionaries are involved.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Optional

from lazybox.config import get_lazybox_settings
from lazybox.core.records import KeywordFrequency, ReadabilityScores, TextAnalysis


STOPWORDS: frozenset[str] = frozenset(
    {
        "the", "a", "an", "is", "are", "was", "were", "to", "of", "in", "on", "at",
        "for", "and", "it", "this", "that", "with", "by", "as",
    }
)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_VOWEL_GROUPS = re.compile(r"[aeiouy]+")
_SENTENCE_END = re.compile(r"[.!?]+")


def count_lines(content: str) -> int:
    if not content:
        return 0
    n = content.count("\n")
    return n if content.endswith("\n") else n + 1


def count_syllables(word: str) -> int:
    word = _NON_ALNUM.sub("", word.lower())
    if not word:
        return 0
    n = len(_VOWEL_GROUPS.findall(word))
    # Silent trailing "e" ("make"), but not "-le" ("table").
    if n > 1 and word.endswith("e") and not word.endswith("le"):
        n -= 1
    return max(n, 1)


def keyword_frequencies(words: list[str], limit: int) -> tuple[KeywordFrequency, ...]:
    counts: Counter[str] = Counter()
    for word in words:
        cleaned = _NON_ALNUM.sub("", word.lower())
        if len(cleaned) > 2 and cleaned not in STOPWORDS:
            counts[cleaned] += 1
    # Most frequent first, ties alphabetical.
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return tuple(KeywordFrequency(keyword=k, count=c) for k, c in ranked[:limit])


def count_sentences(content: str) -> int:
    return sum(1 for part in _SENTENCE_END.split(content) if part.strip())


def readability(words: list[str], sentences: int) -> ReadabilityScores:
    """Flesch-Kincaid grade level and Gunning fog index."""

    if not words or not sentences:
        return ReadabilityScores()
    syllables = [count_syllables(w) for w in words]
    complex_words = sum(1 for s in syllables if s >= 3)
    words_per_sentence = len(words) / sentences
    fk = 0.39 * words_per_sentence + 11.8 * (sum(syllables) / len(words)) - 15.59
    fog = 0.4 * (words_per_sentence + 100.0 * complex_words / len(words))
    return ReadabilityScores(
        flesch_kincaid_grade_level=round(fk, 2),
        gunning_fog_index=round(fog, 2),
    )


def analyze_text(content: str, *, top_keywords: Optional[int] = None) -> TextAnalysis:
    """Analyze `content`; content with a NUL character is reported as binary with counts only."""

    if top_keywords is None:
        top_keywords = get_lazybox_settings().TEXT_TOP_KEYWORDS

    if "\x00" in content:
        return TextAnalysis(char_count=len(content), is_binary=True)

    words = content.split()
    sentences = count_sentences(content)
    return TextAnalysis(
        line_count=count_lines(content),
        word_count=len(words),
        char_count=len(content),
        keywords=keyword_frequencies(words, top_keywords),
        readability=readability(words, sentences),
        average_word_length=round(sum(len(w) for w in words) / len(words), 2) if words else 0.0,
        average_sentence_length=round(len(words) / sentences, 2) if sentences else 0.0,
    )
