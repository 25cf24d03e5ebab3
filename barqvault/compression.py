"""Payload compression: LZMA, LZ4 and Zstd, with per-modality codec choice."""

from __future__ import annotations

import lzma
from dataclasses import dataclass
from enum import Enum

import lz4.block
import zstandard

from barqvault.models import CompressionError, InvalidInputError, Modality

_LZMA_ATTEMPTS = 3
_LZ4_SIZE_HEADER = 4


class CodecKind(str, Enum):
    LZMA = "lzma"
    LZ4 = "lz4"
    ZSTD = "zstd"


@dataclass(frozen=True)
class Codec:
    """A codec with its compression level (LZ4 takes none)."""

    kind: CodecKind
    level: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", CodecKind(self.kind))
        if self.kind is CodecKind.LZ4 and self.level is not None:
            raise InvalidInputError("lz4 takes no level")
        if self.kind is not CodecKind.LZ4 and self.level is None:
            raise InvalidInputError(f"{self.kind.value} requires a level")

    @classmethod
    def lzma(cls, level: int) -> Codec:
        return cls(CodecKind.LZMA, level)

    @classmethod
    def lz4(cls) -> Codec:
        return cls(CodecKind.LZ4)

    @classmethod
    def zstd(cls, level: int) -> Codec:
        return cls(CodecKind.ZSTD, level)


def compress_lzma(data: bytes, level: int) -> bytes:
    """Compress data as an XZ stream at the given preset (0-9)."""
    try:
        return lzma.compress(bytes(data), format=lzma.FORMAT_XZ, preset=level)
    except (lzma.LZMAError, ValueError, TypeError) as exc:
        raise CompressionError(f"LZMA compression failed: {exc}") from exc


def decompress_lzma(data: bytes, hint_original_size: int) -> bytes:
    """Decompress an XZ stream.

    The output limit starts at max(hint, 4 * len(data)) and is doubled on
    overflow, up to three attempts.
    """
    buf_size = max(hint_original_size, len(data) * 4)
    for _ in range(_LZMA_ATTEMPTS):
        decompressor = lzma.LZMADecompressor(format=lzma.FORMAT_XZ)
        try:
            out = decompressor.decompress(bytes(data), max_length=buf_size)
        except lzma.LZMAError as exc:
            raise CompressionError(f"LZMA decompression failed: {exc}") from exc
        if decompressor.eof:
            return out
        if decompressor.needs_input:
            raise CompressionError("LZMA decompression failed: truncated input")
        buf_size *= 2
    raise CompressionError("LZMA decompression failed (buffer overflow after retries)")


def compress_lz4(data: bytes) -> bytes:
    """Compress data as an LZ4 block prefixed with its 4-byte little-endian size."""
    data = bytes(data)
    if not data:
        return (0).to_bytes(_LZ4_SIZE_HEADER, "little")
    try:
        return lz4.block.compress(data, store_size=True)
    except (lz4.block.LZ4BlockError, ValueError) as exc:
        raise CompressionError("LZ4 compression failed") from exc


def decompress_lz4(data: bytes, original_size: int) -> bytes:
    """Decompress an LZ4 block; original_size is the largest output allowed."""
    data = bytes(data)
    if len(data) < _LZ4_SIZE_HEADER:
        raise CompressionError("LZ4 decompression failed: missing size header")
    stored = int.from_bytes(data[:_LZ4_SIZE_HEADER], "little")
    if stored > original_size:
        raise CompressionError("LZ4 decompression failed: output exceeds buffer")
    if stored == 0:
        return b""
    try:
        return lz4.block.decompress(data)
    except (lz4.block.LZ4BlockError, ValueError) as exc:
        raise CompressionError("LZ4 decompression failed") from exc


def _compress_zstd(data: bytes, level: int) -> bytes:
    try:
        return zstandard.ZstdCompressor(level=level).compress(bytes(data))
    except zstandard.ZstdError as exc:
        raise CompressionError(f"Zstd compress: {exc}") from exc


def _decompress_zstd(data: bytes, capacity: int) -> bytes:
    try:
        out = zstandard.ZstdDecompressor().decompress(
            bytes(data), max_output_size=capacity
        )
    except zstandard.ZstdError as exc:
        raise CompressionError(f"Zstd decompress: {exc}") from exc
    if len(out) > capacity:
        raise CompressionError(
            f"Zstd decompress: output of {len(out)} bytes exceeds capacity {capacity}"
        )
    return out


def compress(data: bytes, codec: Codec) -> bytes:
    """Compress data with the given codec."""
    if codec.kind is CodecKind.LZMA:
        return compress_lzma(data, codec.level)
    if codec.kind is CodecKind.LZ4:
        return compress_lz4(data)
    return _compress_zstd(data, codec.level)


def decompress(data: bytes, codec: Codec, hint_size: int) -> bytes:
    """Decompress data; hint_size sizes the output (a hard limit for LZ4 and Zstd)."""
    if codec.kind is CodecKind.LZMA:
        return decompress_lzma(data, hint_size)
    if codec.kind is CodecKind.LZ4:
        return decompress_lz4(data, hint_size)
    return _decompress_zstd(data, hint_size)


def select_codec_for_modality(modality: Modality) -> Codec:
    """Pick the codec suited to a modality.

    Text and documents get LZMA 6, audio LZMA 4, images Zstd 9, video LZ4.
    """
    modality = Modality(modality)
    if modality in (Modality.TEXT, Modality.DOCUMENT):
        return Codec.lzma(6)
    if modality is Modality.AUDIO:
        return Codec.lzma(4)
    if modality is Modality.IMAGE:
        return Codec.zstd(9)
    return Codec.lz4()