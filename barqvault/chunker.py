"""Split long text into overlapping chunks on sentence boundaries."""

from __future__ import annotations

from dataclasses import dataclass

_SENTENCE_ENDINGS = frozenset(".?!")


@dataclass
class ChunkConfig:
    """Chunk size and overlap, both counted in whitespace-separated words."""

    chunk_size_tokens: int = 512
    overlap_tokens: int = 64


def should_chunk(text: str, threshold: int) -> bool:
    """True when text has more words than threshold."""
    return len(text.split()) > threshold


def _sentences(text: str) -> list[str]:
    sentences: list[str] = []
    current: list[str] = []
    for ch in text:
        current.append(ch)
        if ch in _SENTENCE_ENDINGS:
            trimmed = "".join(current).strip()
            if trimmed:
                sentences.append(trimmed)
            current.clear()
    tail = "".join(current).strip()
    if tail:
        sentences.append(tail)
    return sentences


def chunk_text(text: str, config: ChunkConfig | None = None) -> list[str]:
    """Split text into chunks of about chunk_size_tokens words.

    Each chunk after the first starts with the last overlap_tokens words of
    the previous one. Text short enough to need no chunking is returned whole.
    """
    config = config or ChunkConfig()
    if not should_chunk(text, config.chunk_size_tokens):
        return [text]

    chunks: list[str] = []
    acc: list[str] = []
    word_count = 0

    for sentence in _sentences(text):
        wc = len(sentence.split())
        if word_count + wc > config.chunk_size_tokens and acc:
            chunks.append(" ".join(acc))
            all_words = [word for part in acc for word in part.split()]
            overlap = all_words[max(0, len(all_words) - config.overlap_tokens):]
            acc = [" ".join(overlap)]
            word_count = len(overlap)
        acc.append(sentence)
        word_count += wc

    if acc:
        chunks.append(" ".join(acc))

    return chunks or [text]