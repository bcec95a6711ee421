"""LLM provider configuration built from Lifemap settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lifemap.config import Settings

SUPPORTED_PROVIDERS = ("openai", "anthropic", "openai-compatible")


def redact_api_key(key: str | None) -> str | None:
    """Redact an API key, showing only the first 4 and last 4 characters.

    Returns None if the key is None, or the redacted string otherwise.
    Short keys (8 chars or fewer) are fully redacted as '****'.
    """
    if key is None:
        return None
    if len(key) <= 8:
        return "****"
    return f"{key[:4]}...{key[-4:]}"


@dataclass
class LLMConfig:
    """Configuration for the classification oracle's LLM provider.

    Supports three providers:
    - "openai": OpenAI GPT models (default)
    - "anthropic": Anthropic Claude models
    - "openai-compatible": Any OpenAI-compatible API (Ollama, vLLM, Gemini's
      OpenAI endpoint, DeepSeek, ...); requires base_url

    Environment variables:
    - LIFEMAP_LLM_PROVIDER, LIFEMAP_LLM_MODEL, LIFEMAP_LLM_BASE_URL
    - LIFEMAP_LLM_API_KEY: explicit key for any provider
    - OPENAI_API_KEY / ANTHROPIC_API_KEY: per-provider fallback
    """

    provider: str = "openai"
    model: str = "gpt-4o-mini"
    temperature: float = 0.2
    max_tokens: int = 4096
    base_url: str | None = None
    api_key: str | None = None

    @classmethod
    def from_settings(cls, settings: "Settings") -> LLMConfig:
        """Create LLMConfig from Lifemap settings (already env-resolved)."""
        return cls(
            provider=settings.llm_provider,
            model=settings.llm_model,
            base_url=settings.llm_base_url or None,
            api_key=settings.llm_api_key or None,
        )

    def resolve_api_key(self) -> str | None:
        """Resolve the API key: explicit > env var per provider."""
        if self.api_key:
            return self.api_key
        if self.provider == "anthropic":
            return os.environ.get("ANTHROPIC_API_KEY")
        return os.environ.get("OPENAI_API_KEY")
