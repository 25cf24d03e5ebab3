"""Multimodal embedding store core: hybrid BM25 and vector search, compression, ingestion and wire conversion."""

__version__ = "0.1.0"