import pytest

from barqvault.detector import detect_mime_type, detect_modality
from barqvault.models import Modality


def sample_pdf_bytes():
    return b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\n%%EOF\n"


def sample_png_bytes():
    return b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + bytes(13)


def sample_wav_bytes():
    return b"RIFF" + (36).to_bytes(4, "little") + b"WAVEfmt " + bytes(24)


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("doc.txt", Modality.TEXT),
        ("notes.md", Modality.TEXT),
        ("data.json", Modality.TEXT),
        ("report.pdf", Modality.DOCUMENT),
        ("slide.pptx", Modality.DOCUMENT),
        ("photo.jpg", Modality.IMAGE),
        ("image.png", Modality.IMAGE),
        ("audio.mp3", Modality.AUDIO),
        ("sound.wav", Modality.AUDIO),
        ("clip.mp4", Modality.VIDEO),
        ("movie.mkv", Modality.VIDEO),
    ],
)
def test_detect_modality_by_extension(filename, expected):
    assert detect_modality(filename, None) == expected


def test_extension_is_case_insensitive():
    assert detect_modality("PHOTO.JPG") == Modality.IMAGE


def test_detect_modality_pdf_magic_bytes():
    assert detect_modality("file.unknown", sample_pdf_bytes()) == Modality.DOCUMENT


def test_detect_modality_png_magic_bytes():
    assert detect_modality("file.unknown", sample_png_bytes()) == Modality.IMAGE


def test_detect_modality_wav_magic_bytes():
    assert detect_modality("file.unknown", sample_wav_bytes()) == Modality.AUDIO


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"\xff\xd8\xff\xe0rest", Modality.IMAGE),
        (b"\x00\x00\x00\x18ftypmp42", Modality.VIDEO),
        (b"OggS\x00\x02", Modality.AUDIO),
        (b"GIF89a\x01\x00", Modality.IMAGE),
        (b"GIF87a\x01\x00", Modality.IMAGE),
        (b"plain old bytes", Modality.TEXT),
    ],
)
def test_detect_modality_other_magic(data, expected):
    assert detect_modality("blob", data) == expected


def test_detect_modality_extension_wins_over_magic():
    assert detect_modality("doc.txt", sample_pdf_bytes()) == Modality.TEXT


def test_detect_modality_unknown_defaults_to_text():
    assert detect_modality("file.xyz", None) == Modality.TEXT


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("doc.txt", "text/plain"),
        ("notes.md", "text/markdown"),
        ("report.pdf", "application/pdf"),
        ("photo.jpg", "image/jpeg"),
        ("clip.mp4", "video/mp4"),
        ("movie.mkv", "video/x-matroska"),
        ("archive.zip", "application/octet-stream"),
        ("noextension", "application/octet-stream"),
    ],
)
def test_detect_mime_type(filename, expected):
    assert detect_mime_type(filename) == expected