"""Detect a file's modality and MIME type from its name and magic bytes."""

from __future__ import annotations

from pathlib import PurePosixPath

from barqvault.models import Modality

_EXTENSION_MODALITY: dict[str, Modality] = {
    **dict.fromkeys(
        ("txt", "md", "json", "csv", "xml", "yaml", "yml", "toml", "rst"), Modality.TEXT
    ),
    **dict.fromkeys(("pdf", "docx", "xlsx", "pptx", "odt", "ods"), Modality.DOCUMENT),
    **dict.fromkeys(
        ("jpg", "jpeg", "png", "gif", "webp", "bmp", "tiff", "tif", "avif"),
        Modality.IMAGE,
    ),
    **dict.fromkeys(("mp3", "wav", "flac", "ogg", "aac", "opus", "m4a"), Modality.AUDIO),
    **dict.fromkeys(("mp4", "mkv", "avi", "mov", "webm", "m4v", "ts"), Modality.VIDEO),
}

_MIME_TYPES: dict[str, str] = {
    "txt": "text/plain",
    "text": "text/plain",
    "md": "text/markdown",
    "json": "application/json",
    "csv": "text/csv",
    "xml": "application/xml",
    "yaml": "application/yaml",
    "yml": "application/yaml",
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "bmp": "image/bmp",
    "tiff": "image/tiff",
    "tif": "image/tiff",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "flac": "audio/flac",
    "ogg": "audio/ogg",
    "aac": "audio/aac",
    "opus": "audio/opus",
    "mp4": "video/mp4",
    "mkv": "video/x-matroska",
    "avi": "video/x-msvideo",
    "mov": "video/quicktime",
    "webm": "video/webm",
}

_DEFAULT_MIME = "application/octet-stream"


def _extension(filename: str) -> str | None:
    suffix = PurePosixPath(filename).suffix
    return suffix[1:].lower() if suffix else None


def _sniff(data: bytes) -> Modality | None:
    if data.startswith(b"\xff\xd8\xff") or data.startswith(b"\x89PNG\r\n\x1a\n"):
        return Modality.IMAGE
    if data.startswith(b"%PDF"):
        return Modality.DOCUMENT
    if len(data) > 8 and data[4:8] == b"ftyp":
        return Modality.VIDEO
    if data.startswith(b"RIFF") and data[8:12] == b"WAVE":
        return Modality.AUDIO
    if data.startswith(b"OggS"):
        return Modality.AUDIO
    if data.startswith((b"GIF87a", b"GIF89a")):
        return Modality.IMAGE
    return None


def detect_modality(filename: str, raw_bytes: bytes | None = None) -> Modality:
    """Modality from the file extension, then magic bytes; defaults to text."""
    ext = _extension(filename)
    if ext is not None and ext in _EXTENSION_MODALITY:
        return _EXTENSION_MODALITY[ext]
    if raw_bytes is not None:
        sniffed = _sniff(bytes(raw_bytes))
        if sniffed is not None:
            return sniffed
    return Modality.TEXT


def detect_mime_type(filename: str) -> str:
    """MIME type for a filename's extension, or application/octet-stream."""
    ext = _extension(filename)
    return _MIME_TYPES.get(ext, _DEFAULT_MIME) if ext is not None else _DEFAULT_MIME