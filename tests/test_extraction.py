import io
import zipfile
from unittest.mock import AsyncMock, patch

import pytest

from barqvault.extraction import (
    OCR_NO_TEXT,
    OCR_UNAVAILABLE,
    DocumentExtractor,
    OcrExtractor,
    PlainTextExtractor,
    strip_xml_tags,
)
from barqvault.models import IngestError, Modality


class _FakeProcess:
    def __init__(self, stdout: bytes, returncode: int = 0) -> None:
        self._stdout = stdout
        self.returncode = returncode

    async def communicate(self):
        return self._stdout, b""


def _docx(entries: dict[str, str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in entries.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def test_can_handle_matches_modality():
    assert PlainTextExtractor().can_handle(Modality.TEXT)
    assert not PlainTextExtractor().can_handle(Modality.IMAGE)
    assert DocumentExtractor().can_handle(Modality.DOCUMENT)
    assert not DocumentExtractor().can_handle(Modality.TEXT)
    assert OcrExtractor().can_handle(Modality.IMAGE)
    assert not OcrExtractor().can_handle(Modality.AUDIO)


@pytest.mark.asyncio
async def test_plain_text_decodes_utf8():
    text = "héllo wörld"
    assert await PlainTextExtractor().extract(text.encode(), "a.txt") == text


@pytest.mark.asyncio
async def test_plain_text_replaces_invalid_bytes():
    result = await PlainTextExtractor().extract(b"ok\xffok", "a.txt")
    assert result == "ok\ufffdok"


def test_strip_xml_tags_removes_tags_and_collapses_whitespace():
    xml = "<w:p><w:t>Hello</w:t>\n   <w:t>World</w:t></w:p>"
    assert strip_xml_tags(xml) == "Hello World"


def test_strip_xml_tags_empty():
    assert strip_xml_tags("<a><b/></a>") == ""


@pytest.mark.asyncio
async def test_docx_extracts_document_body():
    raw = _docx({"word/document.xml": "<doc><p>Quarterly</p> <p>report</p></doc>"})
    assert await DocumentExtractor().extract(raw, "report.DOCX") == "Quarterly report"


@pytest.mark.asyncio
async def test_docx_without_body_falls_back_to_raw_text():
    raw = _docx({"other.xml": "<x/>"})
    result = await DocumentExtractor().extract(raw, "report.docx")
    assert result == raw.decode("utf-8", errors="replace")


@pytest.mark.asyncio
async def test_invalid_docx_raises():
    with pytest.raises(IngestError):
        await DocumentExtractor().extract(b"not a zip archive", "report.docx")


@pytest.mark.asyncio
async def test_other_document_decoded_as_text():
    assert await DocumentExtractor().extract(b"sheet data", "table.xlsx") == "sheet data"


@pytest.mark.asyncio
async def test_pdf_uses_pdftotext_output():
    runner = AsyncMock(return_value=_FakeProcess(b"Extracted PDF text"))
    with patch("asyncio.create_subprocess_exec", new=runner):
        result = await DocumentExtractor().extract(b"%PDF-1.4 body", "doc.pdf")
    assert result == "Extracted PDF text"
    args = runner.call_args.args
    assert args[0] == "pdftotext"
    assert args[2] == "-"


@pytest.mark.asyncio
async def test_pdf_failure_falls_back_to_raw():
    runner = AsyncMock(return_value=_FakeProcess(b"", returncode=1))
    with patch("asyncio.create_subprocess_exec", new=runner):
        result = await DocumentExtractor().extract(b"%PDF-1.4 body", "doc.pdf")
    assert result == "%PDF-1.4 body"


@pytest.mark.asyncio
async def test_pdf_missing_tool_falls_back_to_raw():
    with patch("asyncio.create_subprocess_exec", side_effect=FileNotFoundError()):
        result = await DocumentExtractor().extract(b"%PDF raw", "doc.pdf")
    assert result == "%PDF raw"


@pytest.mark.asyncio
async def test_ocr_missing_tesseract():
    with patch("asyncio.create_subprocess_exec", side_effect=FileNotFoundError()):
        result = await OcrExtractor().extract(b"\x89PNG", "img.png")
    assert result == OCR_UNAVAILABLE


@pytest.mark.asyncio
async def test_ocr_other_spawn_error_raises():
    with patch("asyncio.create_subprocess_exec", side_effect=PermissionError()):
        with pytest.raises(IngestError):
            await OcrExtractor().extract(b"\x89PNG", "img.png")


@pytest.mark.asyncio
async def test_ocr_short_output_reports_no_text():
    runner = AsyncMock(return_value=_FakeProcess(b"  hi \n"))
    with patch("asyncio.create_subprocess_exec", new=runner):
        result = await OcrExtractor().extract(b"\x89PNG", "img.png")
    assert result == OCR_NO_TEXT
    assert runner.call_args.args[0] == "tesseract"
    assert runner.call_args.args[2] == "stdout"


@pytest.mark.asyncio
async def test_ocr_collapses_whitespace():
    runner = AsyncMock(
        return_value=_FakeProcess(b"Invoice   number\n\n forty two \t total due")
    )
    with patch("asyncio.create_subprocess_exec", new=runner):
        result = await OcrExtractor().extract(b"\x89PNG", "img.png")
    assert result == "Invoice number forty two total due"