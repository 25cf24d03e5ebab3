"""Brute-force in-memory vector index using cosine similarity."""

from __future__ import annotations

from collections.abc import Hashable, Sequence

import numpy as np

from barqvault.models import InvalidInputError


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors; 0.0 if either has zero norm.

    The dot product runs over the shorter of the two vectors.
    """
    va = np.asarray(a, dtype=np.float32)
    vb = np.asarray(b, dtype=np.float32)
    n = min(va.size, vb.size)
    dot = float(np.dot(va[:n], vb[:n]))
    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (norm_a * norm_b)


class VectorIndex:
    """Maps document ids to fixed-dimension embeddings."""

    def __init__(self, dim: int) -> None:
        self.dim = dim
        self._vectors: dict[Hashable, np.ndarray] = {}

    def upsert(self, doc_id: Hashable, embedding: Sequence[float]) -> None:
        """Insert or replace an embedding; raises InvalidInputError on a dimension mismatch."""
        vector = np.asarray(embedding, dtype=np.float32)
        if vector.size != self.dim:
            raise InvalidInputError(
                f"Embedding dim mismatch: expected {self.dim}, got {vector.size}"
            )
        self._vectors[doc_id] = vector

    def remove(self, doc_id: Hashable) -> None:
        """Drop a document's embedding if present."""
        self._vectors.pop(doc_id, None)

    def search_cosine(
        self, query: Sequence[float], top_k: int
    ) -> list[tuple[Hashable, float]]:
        """Return up to top_k (doc_id, similarity) pairs, most similar first."""
        q = np.asarray(query, dtype=np.float32)
        scored = [
            (doc_id, cosine_similarity(q, vector))
            for doc_id, vector in self._vectors.items()
        ]
        scored.sort(key=lambda item: item[1], reverse=True)
        return scored[:top_k]