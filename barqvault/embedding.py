"""Embedding compression: delta-f32 encoding followed by Zstd."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from barqvault.compression import Codec, compress, decompress
from barqvault.models import CompressionError

_EMBEDDING_CODEC = Codec.zstd(3)
_F32 = np.dtype("<f4")


def _delta_encode(values: np.ndarray) -> np.ndarray:
    out = values.copy()
    out[1:] = values[1:] - values[:-1]
    return out


def _delta_decode(values: np.ndarray) -> np.ndarray:
    return np.cumsum(values, dtype=np.float32)


def delta_encode_f32(values: Sequence[float]) -> list[float]:
    """Replace each value after the first with its difference from its predecessor."""
    return _delta_encode(np.asarray(values, dtype=np.float32)).tolist()


def delta_decode_f32(values: Sequence[float]) -> list[float]:
    """Invert delta_encode_f32 by a running float32 sum."""
    return _delta_decode(np.asarray(values, dtype=np.float32)).tolist()


def compress_embedding(embedding: Sequence[float]) -> bytes:
    """Delta-encode an embedding as float32 and compress the bytes with Zstd."""
    deltas = _delta_encode(np.asarray(embedding, dtype=np.float32))
    return compress(deltas.astype(_F32).tobytes(), _EMBEDDING_CODEC)


def decompress_embedding(data: bytes, dim: int) -> list[float]:
    """Restore an embedding of exactly dim values from compress_embedding output."""
    expected = dim * _F32.itemsize
    raw = decompress(data, _EMBEDDING_CODEC, expected)
    if len(raw) != expected:
        raise CompressionError(
            f"Zstd decompress error: expected {expected} bytes, got {len(raw)}"
        )
    deltas = np.frombuffer(raw, dtype=_F32).astype(np.float32)
    return _delta_decode(deltas).tolist()