"""Unified LLM client wrapping both Anthropic and OpenAI SDKs."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from lifemap.core.config import SUPPORTED_PROVIDERS, LLMConfig
from lifemap.core.errors import ClassificationError, ConfigError, RateLimitedError

logger = logging.getLogger(__name__)

TRANSIENT_RETRY_DELAY = 5.0


@dataclass
class LLMResponse:
    """Response from an LLM completion call."""

    content: str
    model: str
    input_tokens: int
    output_tokens: int

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


def _retry_after(exc: Exception) -> float | None:
    """Seconds the provider asked us to wait, when it said so."""
    response = getattr(exc, "response", None)
    headers = getattr(response, "headers", None)
    if not headers:
        return None
    value = headers.get("retry-after")
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class LLMClient:
    """Unified LLM client that dispatches to Anthropic or OpenAI SDKs.

    Supports three providers:
    - "anthropic": Uses the anthropic SDK
    - "openai": Uses the openai SDK with OpenAI's default base URL
    - "openai-compatible": Uses the openai SDK with a custom base_url

    Connection failures and timeouts get one retry. Rate limits are not
    retried here: they surface as ``RateLimitedError`` so the batch
    classifier can apply its own backoff policy.
    """

    def __init__(
        self,
        config: LLMConfig,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self._sleep = sleep
        self._client = self._create_client()

    def _create_client(self):
        """Create the underlying SDK client based on provider."""
        if self.config.provider not in SUPPORTED_PROVIDERS:
            raise ConfigError(
                f"Unknown LLM provider: {self.config.provider!r}. "
                f"Supported: {', '.join(repr(p) for p in SUPPORTED_PROVIDERS)}"
            )

        api_key = self.config.resolve_api_key()
        if not api_key and self.config.provider != "openai-compatible":
            raise ConfigError(
                f"No API key for provider {self.config.provider!r}. "
                "Set LIFEMAP_LLM_API_KEY or use --offline."
            )

        if self.config.provider == "anthropic":
            import anthropic

            kwargs = {"api_key": api_key}
            if self.config.base_url:
                kwargs["base_url"] = self.config.base_url
            return anthropic.Anthropic(**kwargs)

        import openai

        kwargs = {}
        if api_key:
            kwargs["api_key"] = api_key
        if self.config.base_url:
            kwargs["base_url"] = self.config.base_url
        elif self.config.provider == "openai-compatible":
            raise ConfigError("openai-compatible provider requires base_url to be set")
        return openai.OpenAI(**kwargs)

    def complete(
        self,
        messages: list[dict],
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        """Send a completion request.

        Args:
            messages: List of message dicts with 'role' and 'content' keys.
            max_tokens: Override max_tokens from config.
            temperature: Override temperature from config.

        Returns:
            LLMResponse with content and token usage.

        Raises:
            RateLimitedError: The provider rate-limited the request.
            ClassificationError: Any other API failure.
        """
        resolved_max_tokens = max_tokens if max_tokens is not None else self.config.max_tokens
        resolved_temperature = temperature if temperature is not None else self.config.temperature

        logger.debug(
            "LLM request: provider=%s model=%s messages=%d",
            self.config.provider,
            self.config.model,
            len(messages),
        )
        if self.config.provider == "anthropic":
            return self._complete_anthropic(messages, resolved_max_tokens, resolved_temperature)
        return self._complete_openai(messages, resolved_max_tokens, resolved_temperature)

    def _complete_anthropic(
        self,
        messages: list[dict],
        max_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        """Complete using the Anthropic SDK."""
        import anthropic

        for attempt in range(2):
            try:
                response = self._client.messages.create(
                    model=self.config.model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    messages=messages,
                )
                return LLMResponse(
                    content=response.content[0].text,
                    model=getattr(response, "model", None) or self.config.model,
                    input_tokens=getattr(response.usage, "input_tokens", 0),
                    output_tokens=getattr(response.usage, "output_tokens", 0),
                )
            except anthropic.RateLimitError as exc:
                raise RateLimitedError(f"Rate limited by anthropic: {exc}", _retry_after(exc)) from exc
            except (anthropic.APIConnectionError, anthropic.APITimeoutError) as exc:
                if attempt == 0:
                    logger.warning("Transient LLM error, retrying in %.0fs: %s", TRANSIENT_RETRY_DELAY, exc)
                    self._sleep(TRANSIENT_RETRY_DELAY)
                else:
                    raise ClassificationError(f"LLM unreachable after 2 attempts: {exc}") from exc
            except anthropic.APIError as exc:
                raise ClassificationError(f"LLM API error: {exc}") from exc

        raise ClassificationError("LLM request failed")

    def _complete_openai(
        self,
        messages: list[dict],
        max_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        """Complete using the OpenAI SDK."""
        import openai

        for attempt in range(2):
            try:
                response = self._client.chat.completions.create(
                    model=self.config.model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    messages=messages,
                )
                usage = response.usage
                return LLMResponse(
                    content=response.choices[0].message.content or "",
                    model=response.model or self.config.model,
                    input_tokens=usage.prompt_tokens if usage else 0,
                    output_tokens=usage.completion_tokens if usage else 0,
                )
            except openai.RateLimitError as exc:
                raise RateLimitedError(f"Rate limited by openai: {exc}", _retry_after(exc)) from exc
            except (openai.APIConnectionError, openai.APITimeoutError) as exc:
                if attempt == 0:
                    logger.warning("Transient LLM error, retrying in %.0fs: %s", TRANSIENT_RETRY_DELAY, exc)
                    self._sleep(TRANSIENT_RETRY_DELAY)
                else:
                    raise ClassificationError(f"LLM unreachable after 2 attempts: {exc}") from exc
            except openai.APIError as exc:
                raise ClassificationError(f"LLM API error: {exc}") from exc

        raise ClassificationError("LLM request failed")
