"""BM25 inverted index."""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Hashable, Iterable


class Bm25Index:
    """BM25 inverted index with configurable k1 (saturation) and b (length normalization)."""

    def __init__(self, k1: float = 1.5, b: float = 0.75) -> None:
        self.k1 = k1
        self.b = b
        self._inverted: dict[str, list[tuple[Hashable, int]]] = {}
        self._doc_lens: dict[Hashable, int] = {}
        self._doc_count = 0
        self._avg_len = 0.0

    @property
    def doc_count(self) -> int:
        return self._doc_count

    def index_document(self, doc_id: Hashable, tokens: Iterable[str]) -> None:
        """Add a document's tokens to the index."""
        tokens = list(tokens)
        for term, freq in Counter(tokens).items():
            self._inverted.setdefault(term, []).append((doc_id, freq))
        self._doc_lens[doc_id] = len(tokens)
        self._doc_count += 1
        self._recompute_avg_len()

    def remove_document(self, doc_id: Hashable) -> None:
        """Remove a document and all its postings."""
        self._doc_lens.pop(doc_id, None)
        if self._doc_count > 0:
            self._doc_count -= 1
        self._inverted = {
            term: kept
            for term, postings in self._inverted.items()
            if (kept := [p for p in postings if p[0] != doc_id])
        }
        self._recompute_avg_len()

    def score(
        self, query_tokens: Iterable[str], top_k: int
    ) -> list[tuple[Hashable, float]]:
        """Return up to top_k (doc_id, score) pairs, best first."""
        n = float(self._doc_count)
        scores: dict[Hashable, float] = {}

        for token in query_tokens:
            postings = self._inverted.get(token)
            if not postings:
                continue
            df = float(len(postings))
            idf = math.log((n - df + 0.5) / (df + 0.5) + 1.0)
            for doc_id, tf in postings:
                doc_len = float(self._doc_lens.get(doc_id, 1))
                ratio = doc_len / self._avg_len if self._avg_len else math.inf
                tf_norm = tf * (self.k1 + 1.0) / (
                    tf + self.k1 * (1.0 - self.b + self.b * ratio)
                )
                scores[doc_id] = scores.get(doc_id, 0.0) + idf * tf_norm

        ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
        return ranked[:top_k]

    def _recompute_avg_len(self) -> None:
        if self._doc_count == 0:
            self._avg_len = 0.0
        else:
            self._avg_len = sum(self._doc_lens.values()) / self._doc_count