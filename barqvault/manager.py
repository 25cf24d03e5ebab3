"""Coordinates the in-memory hybrid index with a record store."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from typing import Protocol

from barqvault.hybrid import HybridEngine, SearchParams
from barqvault.models import BarqError, BarqRecord

logger = logging.getLogger(__name__)

_PROGRESS_EVERY = 1000


class RecordStore(Protocol):
    """Anything that can enumerate every stored record."""

    def iter_all_records(self) -> Iterable[BarqRecord]: ...


class IndexManager:
    """Keeps the BM25, vector and metadata indexes in step with the store."""

    def __init__(self, engine: HybridEngine, store: RecordStore) -> None:
        self.engine = engine
        self.store = store

    def bootstrap(self) -> None:
        """Rebuild every in-memory index from the store."""
        logger.info("Bootstrapping index from store...")
        total = 0
        for total, record in enumerate(self.store.iter_all_records(), start=1):
            self._index(record)
            if total % _PROGRESS_EVERY == 0:
                logger.debug("Bootstrapped %d records...", total)
        logger.info("Bootstrap complete: indexed %d records", total)

    def index_new(self, record: BarqRecord) -> None:
        """Index a newly ingested record in all three sub-indexes."""
        self._index(record)

    def remove(self, doc_id: uuid.UUID, record: BarqRecord) -> None:
        """Remove a record from all three sub-indexes."""
        self.engine.bm25.remove_document(doc_id)
        self.engine.vector.remove(doc_id)
        self.engine.meta.remove_record(doc_id, record)

    def search(self, params: SearchParams) -> list[tuple[uuid.UUID, float]]:
        """Run a hybrid search."""
        return self.engine.search(params)

    def _index(self, record: BarqRecord) -> None:
        self.engine.bm25.index_document(record.id, record.bm25_tokens)
        if record.embedding:
            try:
                self.engine.vector.upsert(record.id, record.embedding)
            except BarqError as exc:
                logger.debug("Skipping embedding of %s: %s", record.id, exc)
        self.engine.meta.index_record(record)