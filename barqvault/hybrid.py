"""Hybrid search combining BM25, vector and metadata indexes with Reciprocal Rank Fusion."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from barqvault.bm25 import Bm25Index
from barqvault.metadata_index import MetadataIndex
from barqvault.models import Modality
from barqvault.tokenizer import tokenize_query
from barqvault.vector import VectorIndex

RRF_K = 60.0
CANDIDATE_MULTIPLIER = 4


@dataclass
class SearchParams:
    """Parameters of one hybrid search."""

    query_embedding: list[float] = field(default_factory=list)
    query_text: str = ""
    vector_weight: float = 0.5
    """Weight of the vector ranking in RRF: 0.0 is pure BM25, 1.0 pure vector."""
    top_k: int = 10
    modality_filter: Modality | str | None = None
    metadata_filters: dict[str, Any] = field(default_factory=dict)


class HybridEngine:
    """Fuses BM25 and vector rankings, restricted by metadata filters."""

    def __init__(self, k1: float, b: float, vector_dim: int) -> None:
        self.bm25 = Bm25Index(k1, b)
        self.vector = VectorIndex(vector_dim)
        self.meta = MetadataIndex()

    def search(self, params: SearchParams) -> list[tuple[uuid.UUID, float]]:
        """Return up to top_k (doc_id, rrf_score) pairs, best first."""
        candidates = self._candidate_set(params)
        depth = params.top_k * CANDIDATE_MULTIPLIER

        bm25_results = self.bm25.score(tokenize_query(params.query_text), depth)
        vector_results = self.vector.search_cosine(params.query_embedding, depth)

        w_vector = params.vector_weight
        w_bm25 = 1.0 - w_vector
        scores: dict[uuid.UUID, float] = {}
        for weight, results in ((w_vector, vector_results), (w_bm25, bm25_results)):
            for rank, (doc_id, _) in enumerate(results):
                scores[doc_id] = scores.get(doc_id, 0.0) + weight / (RRF_K + rank + 1.0)

        ranked = [
            (doc_id, score)
            for doc_id, score in scores.items()
            if candidates is None or doc_id in candidates
        ]
        ranked.sort(key=lambda item: item[1], reverse=True)
        return ranked[: params.top_k]

    def _candidate_set(self, params: SearchParams) -> set[uuid.UUID] | None:
        sets: list[set[uuid.UUID]] = []
        if params.modality_filter is not None:
            sets.append(set(self.meta.filter_by_modality(params.modality_filter)))
        if isinstance(params.metadata_filters, dict):
            for key, value in params.metadata_filters.items():
                if isinstance(value, str):
                    sets.append(set(self.meta.filter_by_meta_key_value(key, value)))
        if not sets:
            return None
        return set.intersection(*sets)