"""Conversion between domain requests and their wire (protobuf-shaped) messages."""

from __future__ import annotations

import json
import struct
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from barqvault.models import (
    BarqRecord,
    IngestRequest,
    InvalidInputError,
    Modality,
    SearchRequest,
    StorageMode,
)

_F32_SIZE = 4


@dataclass
class ProtoIngestRequest:
    """Wire form of an ingest request."""

    summary: str = ""
    embedding: bytes = b""
    embedding_dim: int = 0
    modality: str = ""
    storage_mode: str = ""
    raw_payload: bytes = b""
    filename: str = ""
    metadata_json: str = ""
    chunk_index: int = 0
    total_chunks: int = 0
    parent_id: str = ""


@dataclass
class ProtoSearchRequest:
    """Wire form of a search request."""

    query_embedding: bytes = b""
    embedding_dim: int = 0
    query_text: str = ""
    vector_weight: float = 0.0
    top_k: int = 0
    modality_filter: str = ""
    metadata_filter_json: str = ""


@dataclass
class ProtoSearchResult:
    """Wire form of one search hit."""

    id: str = ""
    summary: str = ""
    filename: str = ""
    modality: str = ""
    score: float = 0.0
    has_payload: bool = False
    metadata_json: str = ""


def _pack_f32(values: Sequence[float]) -> bytes:
    return struct.pack(f"<{len(values)}f", *values)


def _unpack_f32(data: bytes) -> list[float]:
    return list(struct.unpack(f"<{len(data) // _F32_SIZE}f", data))


def _dump_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def _load_json_object(text: str) -> Any:
    if not text:
        return {}
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidInputError(f"invalid JSON: {exc}") from exc


def ingest_request_to_proto(request: IngestRequest) -> ProtoIngestRequest:
    """Encode an ingest request; the embedding becomes little-endian f32 bytes."""
    return ProtoIngestRequest(
        summary=request.summary,
        embedding=_pack_f32(request.embedding),
        embedding_dim=len(request.embedding),
        modality=str(request.modality),
        storage_mode=str(request.storage_mode),
        raw_payload=request.raw_payload or b"",
        filename=request.filename or "",
        metadata_json=_dump_json(request.metadata),
        chunk_index=request.chunk_index,
        total_chunks=request.total_chunks,
        parent_id=str(request.parent_id) if request.parent_id is not None else "",
    )


def ingest_request_from_proto(proto: ProtoIngestRequest) -> IngestRequest:
    """Decode and validate a wire ingest request."""
    if len(proto.embedding) % _F32_SIZE:
        raise InvalidInputError("Embedding byte length must be divisible by 4")
    expected = proto.embedding_dim
    actual = len(proto.embedding) // _F32_SIZE
    if actual != expected and expected != 0:
        raise InvalidInputError(
            f"embedding_dim {expected} does not match byte len {actual}"
        )

    modality = Modality.parse(proto.modality)
    storage_mode = StorageMode.parse(proto.storage_mode)
    metadata = _load_json_object(proto.metadata_json)

    parent_id = None
    if proto.parent_id:
        try:
            parent_id = uuid.UUID(proto.parent_id)
        except ValueError as exc:
            raise InvalidInputError(f"parent_id: {exc}") from exc

    return IngestRequest(
        summary=proto.summary,
        embedding=_unpack_f32(proto.embedding),
        modality=modality,
        storage_mode=storage_mode,
        filename=proto.filename or None,
        raw_payload=proto.raw_payload or None,
        metadata=metadata,
        chunk_index=proto.chunk_index,
        total_chunks=proto.total_chunks,
        parent_id=parent_id,
    )


def search_request_to_proto(request: SearchRequest) -> ProtoSearchRequest:
    """Encode a search request; the query embedding becomes little-endian f32 bytes."""
    return ProtoSearchRequest(
        query_embedding=_pack_f32(request.query_embedding),
        embedding_dim=len(request.query_embedding),
        query_text=request.query_text,
        vector_weight=request.vector_weight,
        top_k=request.top_k,
        modality_filter=(
            str(request.modality_filter) if request.modality_filter is not None else ""
        ),
        metadata_filter_json=_dump_json(request.metadata_filters),
    )


def search_request_from_proto(proto: ProtoSearchRequest) -> SearchRequest:
    """Decode and validate a wire search request."""
    if len(proto.query_embedding) % _F32_SIZE:
        raise InvalidInputError("Query embedding byte length must be divisible by 4")

    modality_filter = (
        Modality.parse(proto.modality_filter) if proto.modality_filter else None
    )

    return SearchRequest(
        query_embedding=_unpack_f32(proto.query_embedding),
        query_text=proto.query_text,
        vector_weight=proto.vector_weight,
        top_k=proto.top_k,
        modality_filter=modality_filter,
        metadata_filters=_load_json_object(proto.metadata_filter_json),
    )


def record_to_search_result(record: BarqRecord) -> ProtoSearchResult:
    """Build a wire search hit from a record; the score is left at 0.0 for the caller."""
    return ProtoSearchResult(
        id=str(record.id),
        summary=record.summary,
        filename=record.filename or "",
        modality=str(record.modality),
        score=0.0,
        has_payload=record.compressed_payload is not None,
        metadata_json=_dump_json(record.metadata),
    )