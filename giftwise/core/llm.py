"""
GiftWise — LLM Provider Abstraction.

Single public function `complete()` that routes to the configured provider.
Provider is selected on first use via the LLM_PROVIDER env var.
Supports: openai (default), gemini, anthropic, cohere.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass
class Prompt:
    """One system + user exchange sent to a provider."""

    system: str
    user_message: str
    max_tokens: int = 256
    temperature: float = 0.7


# Type alias for provider implementations: (api_key, model, prompt) -> text
_ProviderFn = Callable[[str, str, Prompt], Awaitable[str]]

# ---------------------------------------------------------------------------
# Provider implementations
# ---------------------------------------------------------------------------


async def _complete_openai(api_key: str, model: str, prompt: Prompt) -> str:
    from openai import AsyncOpenAI

    client = AsyncOpenAI(api_key=api_key)
    response = await client.chat.completions.create(
        model=model,
        max_tokens=prompt.max_tokens,
        temperature=prompt.temperature,
        messages=[
            {"role": "system", "content": prompt.system},
            {"role": "user", "content": prompt.user_message},
        ],
    )
    return response.choices[0].message.content or ""


async def _complete_gemini(api_key: str, model: str, prompt: Prompt) -> str:
    import google.generativeai as genai

    genai.configure(api_key=api_key)
    gm = genai.GenerativeModel(model_name=model, system_instruction=prompt.system)
    response = await gm.generate_content_async(
        prompt.user_message,
        generation_config=genai.types.GenerationConfig(
            max_output_tokens=prompt.max_tokens,
            temperature=prompt.temperature,
        ),
    )
    return response.text


async def _complete_anthropic(api_key: str, model: str, prompt: Prompt) -> str:
    import anthropic

    client = anthropic.AsyncAnthropic(api_key=api_key)
    response = await client.messages.create(
        model=model,
        max_tokens=prompt.max_tokens,
        temperature=prompt.temperature,
        system=prompt.system,
        messages=[{"role": "user", "content": prompt.user_message}],
    )
    return response.content[0].text


async def _complete_cohere(api_key: str, model: str, prompt: Prompt) -> str:
    import cohere

    client = cohere.AsyncClientV2(api_key=api_key)
    response = await client.chat(
        model=model,
        max_tokens=prompt.max_tokens,
        temperature=prompt.temperature,
        messages=[
            {"role": "system", "content": prompt.system},
            {"role": "user", "content": prompt.user_message},
        ],
    )
    return response.message.content[0].text


# ---------------------------------------------------------------------------
# Provider selection (runs once at first call)
# ---------------------------------------------------------------------------

_PROVIDERS: dict[str, tuple[_ProviderFn, str]] = {
    "openai":    (_complete_openai,    "gpt-4.1-nano"),
    "gemini":    (_complete_gemini,    "gemini-2.0-flash"),
    "anthropic": (_complete_anthropic, "claude-haiku-4-5-20251001"),
    "cohere":    (_complete_cohere,    "command-a-03-2025"),
}


@dataclass
class _Selected:
    fn: _ProviderFn
    model: str
    api_key: str


def _select_provider() -> _Selected:
    """Read settings and resolve the provider function, model and key."""
    from giftwise.config import settings

    provider_name = settings.LLM_PROVIDER.lower()
    if provider_name not in _PROVIDERS:
        raise ValueError(
            f"Unknown LLM_PROVIDER={provider_name!r}. "
            f"Supported: {', '.join(_PROVIDERS)}"
        )

    fn, default_model = _PROVIDERS[provider_name]
    model = settings.LLM_MODEL or default_model

    logger.info("LLM provider: %s, model: %s", provider_name, model)
    return _Selected(fn=fn, model=model, api_key=settings.LLM_API_KEY)


# Lazy singleton, populated on first call to complete()
_selected: _Selected | None = None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def complete(
    system: str,
    user_message: str,
    max_tokens: int = 256,
    temperature: float = 0.7,
) -> str:
    """Send a prompt to the configured LLM provider and return the response text.

    Raises on API errors — callers should handle exceptions.
    """
    global _selected

    if _selected is None:
        _selected = _select_provider()

    prompt = Prompt(
        system=system,
        user_message=user_message,
        max_tokens=max_tokens,
        temperature=temperature,
    )
    return await _selected.fn(_selected.api_key, _selected.model, prompt)
