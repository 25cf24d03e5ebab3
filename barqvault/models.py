"""Core domain types shared across the vault: errors, enums and records."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class BarqError(Exception):
    """Base class for every error raised by the vault."""


class ProviderError(BarqError):
    """An external provider (LLM, embedder, server) failed."""


class CompressionError(BarqError):
    """Compressing or decompressing a payload failed."""


class InvalidInputError(BarqError, ValueError):
    """The caller supplied malformed or inconsistent input."""


class IngestError(BarqError):
    """A step of the ingestion pipeline failed."""


class _WireEnum(str, Enum):
    """String enum whose text form is its wire value."""

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str):
        """Parse a wire string, raising InvalidInputError when unknown."""
        try:
            return cls(text.strip().lower())
        except ValueError:
            raise InvalidInputError(
                f"unknown {cls.__name__.lower()}: {text!r}"
            ) from None


class Modality(_WireEnum):
    TEXT = "text"
    DOCUMENT = "document"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"


class StorageMode(_WireEnum):
    TEXT_ONLY = "text_only"
    HYBRID_FILE = "hybrid_file"


_CODEC_KINDS = ("lzma", "lz4", "zstd")


@dataclass(frozen=True)
class CodecType:
    """Codec recorded on a stored record: LZMA(level), LZ4 or Zstd(level)."""

    kind: str
    level: int | None = None

    def __post_init__(self) -> None:
        if self.kind not in _CODEC_KINDS:
            raise InvalidInputError(f"unknown codec: {self.kind!r}")
        if self.kind == "lz4" and self.level is not None:
            raise InvalidInputError("lz4 takes no level")
        if self.kind != "lz4" and self.level is None:
            raise InvalidInputError(f"{self.kind} requires a level")

    @classmethod
    def lzma(cls, level: int) -> CodecType:
        return cls("lzma", level)

    @classmethod
    def lz4(cls) -> CodecType:
        return cls("lz4")

    @classmethod
    def zstd(cls, level: int) -> CodecType:
        return cls("zstd", level)

    def __str__(self) -> str:
        return self.kind if self.level is None else f"{self.kind}:{self.level}"


@dataclass
class BarqRecord:
    """A fully ingested, indexable record."""

    id: uuid.UUID = field(default_factory=uuid.uuid4)
    parent_id: uuid.UUID | None = None
    chunk_index: int = 0
    total_chunks: int = 1
    modality: Modality = Modality.TEXT
    storage_mode: StorageMode = StorageMode.HYBRID_FILE
    codec: CodecType = field(default_factory=lambda: CodecType.lzma(6))
    filename: str | None = None
    mime_type: str | None = None
    summary: str = ""
    embedding: list[float] = field(default_factory=list)
    compressed_embed: bytes = b""
    embedding_dim: int = 0
    bm25_tokens: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    compressed_payload: bytes | None = None
    original_size: int = 0
    compressed_size: int = 0
    compression_ratio: float = 0.0
    created_at: int = 0
    updated_at: int = 0
    checksum: bytes = bytes(32)


@dataclass
class IngestRequest:
    """A request to ingest one file or chunk."""

    summary: str = ""
    embedding: list[float] = field(default_factory=list)
    modality: Modality = Modality.TEXT
    storage_mode: StorageMode = StorageMode.HYBRID_FILE
    filename: str | None = None
    raw_payload: bytes | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    chunk_index: int = 0
    total_chunks: int = 1
    parent_id: uuid.UUID | None = None


@dataclass
class SearchRequest:
    """A hybrid search query."""

    query_embedding: list[float] = field(default_factory=list)
    query_text: str = ""
    vector_weight: float = 0.5
    top_k: int = 10
    modality_filter: Modality | None = None
    metadata_filters: dict[str, Any] = field(default_factory=dict)


@dataclass
class SearchResult:
    """One hit returned by a search."""

    id: uuid.UUID
    summary: str
    filename: str | None
    modality: Modality
    score: float
    has_payload: bool
    metadata: Any = field(default_factory=dict)

    def to_json(self) -> str:
        """Serialize the result to a JSON object string."""
        return json.dumps(
            {
                "id": str(self.id),
                "summary": self.summary,
                "filename": self.filename,
                "modality": self.modality.value,
                "score": self.score,
                "has_payload": self.has_payload,
                "metadata": self.metadata,
            }
        )