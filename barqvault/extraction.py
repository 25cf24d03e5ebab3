"""Text extraction from raw file bytes: plain text, documents and OCR."""

from __future__ import annotations

import asyncio
import io
import os
import tempfile
import zipfile
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager, suppress
from pathlib import PurePosixPath

from barqvault.models import IngestError, Modality

OCR_UNAVAILABLE = "[Image: OCR not available — install tesseract]"
OCR_NO_TEXT = "[Image: no readable text detected]"

_MIN_OCR_BYTES = 20
_DOCX_BODY = "word/document.xml"


class TextExtractor(ABC):
    """Turns the raw bytes of a file into text."""

    @abstractmethod
    def can_handle(self, modality: Modality) -> bool:
        """True if this extractor handles content of the given modality."""

    @abstractmethod
    async def extract(self, raw: bytes, filename: str) -> str:
        """Extract a text representation of raw."""


def _lossy(raw: bytes) -> str:
    return bytes(raw).decode("utf-8", errors="replace")


def _extension(filename: str) -> str | None:
    suffix = PurePosixPath(filename).suffix
    return suffix[1:].lower() if suffix else None


@contextmanager
def _temp_file(raw: bytes, *, label: str, suffix: str = "") -> Iterator[str]:
    """Write raw to a temporary file, yield its path and delete it afterwards."""
    try:
        with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as handle:
            path = handle.name
            handle.write(bytes(raw))
    except OSError as exc:
        raise IngestError(f"{label}: {exc}") from exc
    try:
        yield path
    finally:
        with suppress(OSError):
            os.unlink(path)


async def _run(*args: str) -> tuple[int | None, bytes]:
    """Run a program and return its exit code and standard output."""
    process = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, _ = await process.communicate()
    return process.returncode, stdout


def strip_xml_tags(xml: str) -> str:
    """Drop everything between '<' and '>' and collapse runs of whitespace."""
    kept: list[str] = []
    in_tag = False
    for ch in xml:
        if ch == "<":
            in_tag = True
        elif ch == ">":
            in_tag = False
        elif not in_tag:
            kept.append(ch)
    return " ".join("".join(kept).split())


class PlainTextExtractor(TextExtractor):
    """Decodes plain text files as UTF-8, replacing invalid sequences."""

    def can_handle(self, modality: Modality) -> bool:
        return Modality(modality) is Modality.TEXT

    async def extract(self, raw: bytes, filename: str) -> str:
        return _lossy(raw)


async def _extract_pdf(raw: bytes) -> str:
    with _temp_file(raw, label="tmpfile", suffix=".pdf") as path:
        try:
            code, stdout = await _run("pdftotext", path, "-")
        except OSError:
            return _lossy(raw)
    return _lossy(stdout) if code == 0 else _lossy(raw)


def _extract_docx(raw: bytes) -> str:
    try:
        archive = zipfile.ZipFile(io.BytesIO(bytes(raw)))
    except (zipfile.BadZipFile, ValueError, OSError) as exc:
        raise IngestError(f"DOCX zip error: {exc}") from exc
    with archive:
        if _DOCX_BODY not in archive.namelist():
            return _lossy(raw)
        try:
            xml = archive.read(_DOCX_BODY).decode("utf-8")
        except (zipfile.BadZipFile, UnicodeDecodeError, OSError, RuntimeError) as exc:
            raise IngestError(f"DOCX read error: {exc}") from exc
    return strip_xml_tags(xml)


class DocumentExtractor(TextExtractor):
    """Extracts text from PDFs (via pdftotext), DOCX files and other documents."""

    def can_handle(self, modality: Modality) -> bool:
        return Modality(modality) is Modality.DOCUMENT

    async def extract(self, raw: bytes, filename: str) -> str:
        ext = _extension(filename)
        if ext == "pdf":
            return await _extract_pdf(raw)
        if ext == "docx":
            return _extract_docx(raw)
        return _lossy(raw)


class OcrExtractor(TextExtractor):
    """Extracts text from images with the tesseract OCR program."""

    def can_handle(self, modality: Modality) -> bool:
        return Modality(modality) is Modality.IMAGE

    async def extract(self, raw: bytes, filename: str) -> str:
        with _temp_file(raw, label="OCR tmpfile") as path:
            try:
                _, stdout = await _run("tesseract", path, "stdout")
            except FileNotFoundError:
                return OCR_UNAVAILABLE
            except OSError as exc:
                raise IngestError(f"tesseract error: {exc}") from exc
        cleaned = " ".join(_lossy(stdout).split())
        if len(cleaned.encode("utf-8")) < _MIN_OCR_BYTES:
            return OCR_NO_TEXT
        return cleaned