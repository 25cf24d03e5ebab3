"""Embedding generation through hosted or local providers."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from barqvault.models import ProviderError

logger = logging.getLogger(__name__)

OPENAI_BASE_URL = "https://api.openai.com"
MISTRAL_BASE_URL = "https://api.mistral.ai"
COHERE_EMBED_URL = "https://api.cohere.ai/v1/embed"

_TIMEOUT_SECS = 15.0
_ATTEMPTS = 3
_BASE_DELAY_SECS = 0.5
_FALLBACK_DIM = 1536


class EmbedProvider(str, Enum):
    OPENAI = "openai"
    COHERE = "cohere"
    MISTRAL = "mistral"
    LOCAL = "local"


@dataclass
class EmbedConfig:
    """Which embedding provider to call and the dimension it must return."""

    provider: EmbedProvider = EmbedProvider.OPENAI
    api_key: str | None = None
    model: str = "text-embedding-3-small"
    base_url: str | None = None
    expected_dim: int = 1536

    def __post_init__(self) -> None:
        self.provider = EmbedProvider(self.provider)


def _dig(value: Any, *path: str | int) -> Any:
    """Follow keys and indexes into decoded JSON, yielding None when absent."""
    for key in path:
        if isinstance(key, int):
            if not isinstance(value, list) or key >= len(value):
                return None
            value = value[key]
        else:
            if not isinstance(value, dict):
                return None
            value = value.get(key)
    return value


def _parse_f32_array(value: Any) -> list[float]:
    if not isinstance(value, list):
        return [0.0] * _FALLBACK_DIM
    return [
        float(item)
        if isinstance(item, (int, float)) and not isinstance(item, bool)
        else 0.0
        for item in value
    ]


async def _post_json(
    url: str,
    body: dict[str, Any],
    headers: dict[str, str],
    http_label: str,
    json_label: str,
) -> Any:
    try:
        async with httpx.AsyncClient(timeout=_TIMEOUT_SECS) as client:
            response = await client.post(url, json=body, headers=headers)
    except httpx.HTTPError as exc:
        raise ProviderError(f"{http_label}: {exc}") from exc
    try:
        return response.json()
    except ValueError as exc:
        raise ProviderError(f"{json_label}: {exc}") from exc


async def _call_openai_embed(
    api_key: str, base_url: str, model: str, text: str
) -> list[float]:
    url = f"{base_url.rstrip('/')}/v1/embeddings"
    resp = await _post_json(
        url,
        {"model": model, "input": text},
        {"Authorization": f"Bearer {api_key}"},
        "Embed HTTP",
        "Embed JSON",
    )
    return _parse_f32_array(_dig(resp, "data", 0, "embedding"))


async def _call_cohere_embed(api_key: str, model: str, text: str) -> list[float]:
    resp = await _post_json(
        COHERE_EMBED_URL,
        {"texts": [text], "model": model, "input_type": "search_document"},
        {"Authorization": f"Bearer {api_key}"},
        "Cohere",
        "Cohere JSON",
    )
    return _parse_f32_array(_dig(resp, "embeddings", 0))


async def _call_provider(text: str, config: EmbedConfig) -> list[float]:
    api_key = config.api_key or ""
    if config.provider is EmbedProvider.COHERE:
        return await _call_cohere_embed(api_key, config.model, text)
    default_base = (
        MISTRAL_BASE_URL if config.provider is EmbedProvider.MISTRAL else OPENAI_BASE_URL
    )
    return await _call_openai_embed(
        api_key, config.base_url or default_base, config.model, text
    )


async def embed(text: str, config: EmbedConfig) -> list[float]:
    """Return the embedding of text, retrying provider failures with backoff.

    The local provider returns a zero vector without any network call. A
    result whose length differs from expected_dim raises ProviderError at once.
    """
    if config.provider is EmbedProvider.LOCAL:
        return [0.0] * config.expected_dim

    last_error: ProviderError | None = None
    for attempt in range(_ATTEMPTS):
        try:
            embedding = await _call_provider(text, config)
        except ProviderError as exc:
            logger.warning("Embed attempt %d: %s", attempt + 1, exc)
            last_error = exc
            if attempt + 1 < _ATTEMPTS:
                await asyncio.sleep(_BASE_DELAY_SECS * 2**attempt)
            continue
        if len(embedding) != config.expected_dim:
            raise ProviderError(
                f"Embedding dim mismatch: expected {config.expected_dim}, "
                f"got {len(embedding)}"
            )
        return embedding

    raise last_error or ProviderError("Embedder: all retries failed")