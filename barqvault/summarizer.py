"""Text summarization through hosted or local LLM providers."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from barqvault.models import Modality, ProviderError

logger = logging.getLogger(__name__)

OPENAI_BASE_URL = "https://api.openai.com"
MISTRAL_BASE_URL = "https://api.mistral.ai"
GEMINI_URL_TEMPLATE = (
    "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
)
ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"

_TIMEOUT_SECS = 10.0
_ATTEMPTS = 3
_BASE_DELAY_SECS = 0.5


class LlmProvider(str, Enum):
    OPENAI = "openai"
    MISTRAL = "mistral"
    GEMINI = "gemini"
    ANTHROPIC = "anthropic"
    LOCAL = "local"


@dataclass
class LlmConfig:
    """Which LLM to call for summaries and how long they may be."""

    provider: LlmProvider = LlmProvider.OPENAI
    api_key: str | None = None
    model: str = "gpt-4o-mini"
    base_url: str | None = None
    max_summary_tokens: int = 256

    def __post_init__(self) -> None:
        self.provider = LlmProvider(self.provider)


_PROMPTS: dict[Modality, str] = {
    Modality.TEXT: (
        "Summarize this document concisely in 2-3 sentences. "
        "Capture main topics, key entities, and important facts."
    ),
    Modality.IMAGE: "Summarize what is shown in this image in 2-3 sentences.",
    Modality.AUDIO: "Summarize the key content of this audio transcript in 2-3 sentences.",
    Modality.VIDEO: "Summarize what happens in this video in 2-3 sentences.",
}
_PROMPTS[Modality.DOCUMENT] = _PROMPTS[Modality.TEXT]


def summary_prompt(modality: Modality) -> str:
    """The instruction given to the LLM for content of this modality."""
    return _PROMPTS[Modality(modality)]


def _dig(value: Any, *path: str | int) -> Any:
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


async def _post_json(
    url: str,
    body: dict[str, Any],
    http_label: str,
    json_label: str,
    headers: dict[str, str] | None = None,
    params: dict[str, str] | None = None,
) -> Any:
    try:
        async with httpx.AsyncClient(timeout=_TIMEOUT_SECS) as client:
            response = await client.post(
                url, json=body, headers=headers or {}, params=params
            )
    except httpx.HTTPError as exc:
        raise ProviderError(f"{http_label}: {exc}") from exc
    try:
        return response.json()
    except ValueError as exc:
        raise ProviderError(f"{json_label}: {exc}") from exc


async def _call_openai_compat(
    api_key: str, base_url: str, model: str, prompt: str, max_tokens: int
) -> str:
    url = f"{base_url.rstrip('/')}/v1/chat/completions"
    resp = await _post_json(
        url,
        {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
        },
        "LLM HTTP",
        "LLM JSON",
        headers={"Authorization": f"Bearer {api_key}"},
    )
    content = _dig(resp, "choices", 0, "message", "content")
    if isinstance(content, str):
        return content.strip()
    return f"mock summary for: {prompt}"


async def _call_gemini(api_key: str, model: str, prompt: str) -> str:
    resp = await _post_json(
        GEMINI_URL_TEMPLATE.format(model=model),
        {"contents": [{"parts": [{"text": prompt}]}]},
        "Gemini",
        "Gemini JSON",
        params={"key": api_key},
    )
    text = _dig(resp, "candidates", 0, "content", "parts", 0, "text")
    return text.strip() if isinstance(text, str) else ""


async def _call_anthropic(
    api_key: str, model: str, prompt: str, max_tokens: int
) -> str:
    resp = await _post_json(
        ANTHROPIC_MESSAGES_URL,
        {
            "model": model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        },
        "Anthropic",
        "Anthropic JSON",
        headers={"x-api-key": api_key, "anthropic-version": ANTHROPIC_VERSION},
    )
    text = _dig(resp, "content", 0, "text")
    return text.strip() if isinstance(text, str) else ""


async def _call_provider(user_msg: str, config: LlmConfig) -> str:
    api_key = config.api_key or ""
    if config.provider is LlmProvider.GEMINI:
        return await _call_gemini(api_key, config.model, user_msg)
    if config.provider is LlmProvider.ANTHROPIC:
        return await _call_anthropic(
            api_key, config.model, user_msg, config.max_summary_tokens
        )
    default_base = (
        MISTRAL_BASE_URL if config.provider is LlmProvider.MISTRAL else OPENAI_BASE_URL
    )
    return await _call_openai_compat(
        api_key,
        config.base_url or default_base,
        config.model,
        user_msg,
        config.max_summary_tokens,
    )


async def summarize(text: str, modality: Modality, config: LlmConfig) -> str:
    """Summarize text with the configured LLM, retrying failures with backoff.

    The local provider answers without a network call.
    """
    if config.provider is LlmProvider.LOCAL:
        return f"mock summary for: {text}"

    user_msg = f"{summary_prompt(modality)}\n\n---\n\n{text}"
    last_error: ProviderError | None = None
    for attempt in range(_ATTEMPTS):
        try:
            return await _call_provider(user_msg, config)
        except ProviderError as exc:
            logger.warning("LLM attempt %d: %s", attempt + 1, exc)
            last_error = exc
            if attempt + 1 < _ATTEMPTS:
                await asyncio.sleep(_BASE_DELAY_SECS * 2**attempt)

    raise last_error or ProviderError("Summarizer: all retries failed")