"""Speech-to-text extraction via a local Whisper program or the OpenAI API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath

import httpx

from barqvault.extraction import TextExtractor, _lossy, _run, _temp_file
from barqvault.models import IngestError, Modality, ProviderError

logger = logging.getLogger(__name__)

OPENAI_TRANSCRIPTIONS_URL = "https://api.openai.com/v1/audio/transcriptions"

_TIMEOUT_SECS = 60.0
_DEFAULT_SUFFIX = ".wav"


class SttProvider(str, Enum):
    WHISPER_LOCAL = "whisper_local"
    OPENAI_WHISPER = "openai_whisper"


@dataclass
class SttConfig:
    """Which transcription backend to use and how to reach it."""

    provider: SttProvider = SttProvider.OPENAI_WHISPER
    api_key: str | None = None
    model: str = "whisper-1"
    whisper_bin_path: str | None = None

    def __post_init__(self) -> None:
        self.provider = SttProvider(self.provider)


async def _transcribe_local(raw: bytes, filename: str, config: SttConfig) -> str:
    suffix = PurePosixPath(filename).suffix or _DEFAULT_SUFFIX
    whisper_bin = config.whisper_bin_path or "whisper"
    with _temp_file(raw, label="STT tmpfile", suffix=suffix) as path:
        try:
            _, stdout = await _run(
                whisper_bin, path, "--output-txt", "--output-file", "/dev/stdout"
            )
        except OSError as exc:
            raise IngestError(f"whisper binary error: {exc}") from exc
    return _lossy(stdout).strip()


async def _transcribe_openai(raw: bytes, filename: str, config: SttConfig) -> str:
    if not config.api_key:
        raise IngestError("OpenAI API key required for STT")
    try:
        async with httpx.AsyncClient(timeout=_TIMEOUT_SECS) as client:
            response = await client.post(
                OPENAI_TRANSCRIPTIONS_URL,
                headers={"Authorization": f"Bearer {config.api_key}"},
                files={"file": (filename, bytes(raw), "audio/mpeg")},
                data={"model": config.model},
            )
    except httpx.HTTPError as exc:
        raise ProviderError(f"OpenAI STT: {exc}") from exc
    try:
        body = response.json()
    except ValueError as exc:
        raise ProviderError(f"OpenAI STT parse: {exc}") from exc
    text = body.get("text") if isinstance(body, dict) else None
    if not isinstance(text, str):
        raise ProviderError("No transcript in OpenAI response")
    return text


class SttExtractor(TextExtractor):
    """Transcribes audio files with Whisper, locally or through the OpenAI API."""

    def __init__(self, config: SttConfig | None = None) -> None:
        self.config = config or SttConfig()

    def can_handle(self, modality: Modality) -> bool:
        return Modality(modality) is Modality.AUDIO

    async def extract(self, raw: bytes, filename: str) -> str:
        if self.config.provider is SttProvider.WHISPER_LOCAL:
            return await _transcribe_local(raw, filename, self.config)
        return await _transcribe_openai(raw, filename, self.config)