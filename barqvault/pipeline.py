"""The ingestion pipeline: detect, extract, chunk, summarize, embed, compress."""

from __future__ import annotations

import copy
import hashlib
import logging
import time
import uuid
from dataclasses import dataclass, field

from barqvault.chunker import ChunkConfig, chunk_text, should_chunk
from barqvault.compression import Codec, compress, select_codec_for_modality
from barqvault.detector import detect_mime_type, detect_modality
from barqvault.embedder import EmbedConfig, embed
from barqvault.embedding import compress_embedding
from barqvault.extraction import (
    DocumentExtractor,
    OcrExtractor,
    PlainTextExtractor,
    TextExtractor,
)
from barqvault.models import (
    BarqError,
    BarqRecord,
    CodecType,
    CompressionError,
    IngestError,
    IngestRequest,
    Modality,
    StorageMode,
)
from barqvault.stt import SttConfig, SttExtractor
from barqvault.summarizer import LlmConfig, summarize
from barqvault.tokenizer import tokenize

logger = logging.getLogger(__name__)

_UNKNOWN_FILENAME = "unknown"


@dataclass
class IngestConfig:
    """Configuration of every pipeline stage.

    vision, when set, describes images and videos; images are also read by OCR.
    """

    llm: LlmConfig = field(default_factory=LlmConfig)
    embed: EmbedConfig = field(default_factory=EmbedConfig)
    stt: SttConfig = field(default_factory=SttConfig)
    chunk: ChunkConfig = field(default_factory=ChunkConfig)
    vision: TextExtractor | None = None


def _codec_to_domain(codec: Codec) -> CodecType:
    return CodecType(codec.kind.value, codec.level)


def _checksum(raw: bytes) -> bytes:
    """32-byte BLAKE2s digest of the raw payload."""
    return hashlib.blake2s(raw, digest_size=32).digest()


class IngestPipeline:
    """Turns one ingest request into one or more indexable records."""

    def __init__(self, config: IngestConfig | None = None) -> None:
        self.config = config or IngestConfig()

    async def run(self, request: IngestRequest) -> list[BarqRecord]:
        """Run every ingestion step for one file and return its records."""
        fname = request.filename or _UNKNOWN_FILENAME
        modality = detect_modality(fname, request.raw_payload)
        mime_type = detect_mime_type(fname)
        logger.debug("Step 1: modality=%s", modality)

        raw = bytes(request.raw_payload or b"")
        extracted = await self._extract_text(modality, raw, fname)
        logger.debug("Step 2: extracted %d chars", len(extracted))

        if should_chunk(extracted, self.config.chunk.chunk_size_tokens):
            chunks = chunk_text(extracted, self.config.chunk)
        else:
            chunks = [extracted]
        total_chunks = len(chunks)
        logger.debug("Step 3: %d chunk(s)", total_chunks)

        checksum = _checksum(raw)
        payload, original_size, compressed_size, ratio = self._compress_payload(
            raw, modality, request.storage_mode
        )
        codec = _codec_to_domain(select_codec_for_modality(modality))
        now = int(time.time())
        parent_id = uuid.uuid4() if total_chunks > 1 else request.parent_id

        records: list[BarqRecord] = []
        for chunk_index, chunk in enumerate(chunks):
            summary = await summarize(chunk, modality, self.config.llm)
            logger.debug("Step 4: chunk %d summarized", chunk_index)

            embedding = await embed(summary, self.config.embed)
            logger.debug(
                "Step 5: chunk %d embedded (dim=%d)", chunk_index, len(embedding)
            )

            try:
                compressed_embed = compress_embedding(embedding)
            except BarqError:
                compressed_embed = b""

            records.append(
                BarqRecord(
                    id=uuid.uuid4(),
                    parent_id=parent_id,
                    chunk_index=chunk_index,
                    total_chunks=total_chunks,
                    modality=modality,
                    storage_mode=request.storage_mode,
                    codec=codec,
                    filename=request.filename,
                    mime_type=mime_type,
                    summary=summary,
                    embedding=embedding,
                    compressed_embed=compressed_embed,
                    embedding_dim=self.config.embed.expected_dim,
                    bm25_tokens=tokenize(summary),
                    metadata=copy.deepcopy(request.metadata),
                    compressed_payload=payload,
                    original_size=original_size,
                    compressed_size=compressed_size,
                    compression_ratio=ratio,
                    created_at=now,
                    updated_at=now,
                    checksum=checksum,
                )
            )

        logger.debug("Step 10: assembled %d record(s)", len(records))
        return records

    async def _extract_text(self, modality: Modality, raw: bytes, filename: str) -> str:
        if modality is Modality.TEXT:
            return await PlainTextExtractor().extract(raw, filename)
        if modality is Modality.DOCUMENT:
            return await DocumentExtractor().extract(raw, filename)
        if modality is Modality.AUDIO:
            return await SttExtractor(self.config.stt).extract(raw, filename)
        if modality is Modality.IMAGE:
            try:
                ocr_text = await OcrExtractor().extract(raw, filename)
            except BarqError:
                ocr_text = ""
            vision_text = ""
            if self.config.vision is not None:
                try:
                    vision_text = await self.config.vision.extract(raw, filename)
                except BarqError:
                    vision_text = ""
            return f"{ocr_text} {vision_text}".strip()
        if self.config.vision is None:
            raise IngestError("no vision extractor configured for video")
        return await self.config.vision.extract(raw, filename)

    @staticmethod
    def _compress_payload(
        raw: bytes, modality: Modality, storage_mode: StorageMode
    ) -> tuple[bytes | None, int, int, float]:
        original_size = len(raw)
        if storage_mode is StorageMode.TEXT_ONLY or not raw:
            return None, original_size, 0, 0.0

        try:
            compressed = compress(raw, select_codec_for_modality(modality))
        except CompressionError as exc:
            raise CompressionError(f"Pipeline compress: {exc}") from exc
        compressed_size = len(compressed)
        ratio = 1.0 if compressed_size == 0 else original_size / compressed_size
        return compressed, original_size, compressed_size, ratio