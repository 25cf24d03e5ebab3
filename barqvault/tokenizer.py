"""Tokenizers for BM25 indexing and search queries."""

from __future__ import annotations

from collections.abc import Iterator
from itertools import groupby

STOPWORDS = frozenset(
    {
        "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "from", "as", "is", "was", "are", "were", "be",
        "been", "being", "have", "has", "had", "do", "does", "did", "will",
        "would", "could", "should", "may", "might", "shall", "can", "not",
        "no", "nor", "so", "yet", "both", "either", "neither", "this", "that",
        "these", "those", "it", "its", "they", "them", "their",
    }
)


def _words(text: str) -> Iterator[str]:
    """Yield lowercased runs of alphanumeric characters."""
    for is_word, chars in groupby(text, key=str.isalnum):
        if is_word:
            yield "".join(chars).lower()


def _byte_len(token: str) -> int:
    return len(token.encode("utf-8"))


def _unique(tokens: Iterator[str]) -> list[str]:
    return list(dict.fromkeys(tokens))


def tokenize(text: str) -> list[str]:
    """Tokenize text for indexing.

    Lowercases, splits on non-alphanumerics, drops tokens shorter than three
    bytes and English stopwords, and deduplicates in first-seen order.
    """
    return _unique(
        word
        for word in _words(text)
        if _byte_len(word) >= 3 and word not in STOPWORDS
    )


def tokenize_query(text: str) -> list[str]:
    """Tokenize a search query: like tokenize, but keeps stopwords and two-byte tokens."""
    return _unique(word for word in _words(text) if _byte_len(word) >= 2)