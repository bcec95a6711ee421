"""Tests for the unified LLM client and LLMConfig."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from lifemap.config import Settings
from lifemap.core.config import LLMConfig, redact_api_key
from lifemap.core.errors import ClassificationError, ConfigError, RateLimitedError
from lifemap.llm.client import TRANSIENT_RETRY_DELAY, LLMClient, LLMResponse

# ---------------------------------------------------------------------------
# LLMConfig tests
# ---------------------------------------------------------------------------


class TestLLMConfig:
    """Tests for LLMConfig dataclass and factory methods."""

    def test_defaults_are_openai(self):
        config = LLMConfig()
        assert config.provider == "openai"
        assert config.model == "gpt-4o-mini"
        assert config.base_url is None
        assert config.api_key is None

    def test_from_settings(self, tmp_path):
        settings = Settings(storage_dir=tmp_path, llm_provider="openai-compatible", llm_base_url="http://localhost:11434/v1")
        config = LLMConfig.from_settings(settings)
        assert config.provider == "openai-compatible"
        assert config.base_url == "http://localhost:11434/v1"
        assert config.api_key is None

    def test_resolve_api_key_env_per_provider(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "ant-key")
        monkeypatch.setenv("OPENAI_API_KEY", "oai-key")
        assert LLMConfig(provider="anthropic").resolve_api_key() == "ant-key"
        assert LLMConfig(provider="openai").resolve_api_key() == "oai-key"
        assert LLMConfig(provider="openai", api_key="explicit").resolve_api_key() == "explicit"

    def test_redact_api_key(self):
        assert redact_api_key(None) is None
        assert redact_api_key("short") == "****"
        assert redact_api_key("sk-abcdefghijkl") == "sk-a...ijkl"


# ---------------------------------------------------------------------------
# LLMClient tests
# ---------------------------------------------------------------------------


class TestLLMClientInit:
    def test_init_anthropic_provider(self, monkeypatch):
        mock_anthropic_cls = MagicMock(return_value=MagicMock())
        monkeypatch.setattr("anthropic.Anthropic", mock_anthropic_cls)

        LLMClient(LLMConfig(provider="anthropic", api_key="test-key"))
        mock_anthropic_cls.assert_called_once_with(api_key="test-key")

    def test_init_openai_compatible_with_base_url(self, monkeypatch):
        mock_openai_cls = MagicMock(return_value=MagicMock())
        monkeypatch.setattr("openai.OpenAI", mock_openai_cls)
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        LLMClient(LLMConfig(provider="openai-compatible", base_url="http://localhost:8000/v1"))
        mock_openai_cls.assert_called_once_with(base_url="http://localhost:8000/v1")

    def test_openai_compatible_requires_base_url(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(ConfigError, match="base_url"):
            LLMClient(LLMConfig(provider="openai-compatible"))

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(ConfigError, match="No API key"):
            LLMClient(LLMConfig(provider="openai"))

    def test_unknown_provider(self):
        with pytest.raises(ConfigError, match="Unknown LLM provider"):
            LLMClient(LLMConfig(provider="carrier-pigeon", api_key="k"))


class TestLLMClientCompleteAnthropic:
    def _make_mock_anthropic_response(self, text="Mock response"):
        response = MagicMock()
        response.content = [MagicMock(text=text)]
        response.model = "claude-test"
        response.usage = MagicMock(input_tokens=10, output_tokens=5)
        return response

    def test_complete_anthropic_basic(self, monkeypatch):
        mock_client = MagicMock()
        mock_client.messages.create.return_value = self._make_mock_anthropic_response("[]")
        monkeypatch.setattr("anthropic.Anthropic", lambda **kwargs: mock_client)

        client = LLMClient(LLMConfig(provider="anthropic", api_key="k", max_tokens=999, temperature=0.1))
        result = client.complete([{"role": "user", "content": "Test"}])

        assert isinstance(result, LLMResponse)
        assert result.content == "[]"
        assert result.total_tokens == 15
        call_kwargs = mock_client.messages.create.call_args[1]
        assert call_kwargs["max_tokens"] == 999
        assert call_kwargs["temperature"] == 0.1

    def test_rate_limit_surfaces_with_retry_after(self, monkeypatch):
        """Rate limits are not retried here; they carry retry-after upward."""
        import anthropic

        mock_client = MagicMock()
        mock_client.messages.create.side_effect = anthropic.RateLimitError(
            message="Rate limited",
            response=MagicMock(status_code=429, headers={"retry-after": "12"}),
            body={"error": {"message": "Rate limited"}},
        )
        monkeypatch.setattr("anthropic.Anthropic", lambda **kwargs: mock_client)

        client = LLMClient(LLMConfig(provider="anthropic", api_key="k"))
        with pytest.raises(RateLimitedError) as excinfo:
            client.complete([{"role": "user", "content": "Test"}])
        assert excinfo.value.retry_after == 12.0
        assert mock_client.messages.create.call_count == 1

    def test_api_error_no_retry(self, monkeypatch):
        import anthropic

        mock_client = MagicMock()
        mock_client.messages.create.side_effect = anthropic.APIError(
            message="Bad request",
            request=MagicMock(),
            body={"error": {"message": "Bad request"}},
        )
        monkeypatch.setattr("anthropic.Anthropic", lambda **kwargs: mock_client)

        client = LLMClient(LLMConfig(provider="anthropic", api_key="k"))
        with pytest.raises(ClassificationError, match="LLM API error"):
            client.complete([{"role": "user", "content": "Test"}])
        assert mock_client.messages.create.call_count == 1


class TestLLMClientCompleteOpenAI:
    def _make_mock_openai_response(self, text="Mock OpenAI response", model="gpt-4o-mini"):
        response = MagicMock()
        choice = MagicMock()
        choice.message.content = text
        response.choices = [choice]
        response.model = model
        response.usage = MagicMock(prompt_tokens=40, completion_tokens=20)
        return response

    def test_complete_openai_basic(self, monkeypatch):
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = self._make_mock_openai_response("Hello")
        monkeypatch.setattr("openai.OpenAI", lambda **kwargs: mock_client)

        client = LLMClient(LLMConfig(provider="openai", api_key="k"))
        result = client.complete([{"role": "user", "content": "Hello"}], max_tokens=256)

        assert result.content == "Hello"
        assert result.input_tokens == 40
        assert result.output_tokens == 20
        assert mock_client.chat.completions.create.call_args[1]["max_tokens"] == 256

    def test_connection_error_retried_once(self, monkeypatch):
        """A transient connection error waits and retries once."""
        import openai

        sleeps: list[float] = []
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = [
            openai.APIConnectionError(request=MagicMock()),
            self._make_mock_openai_response("after retry"),
        ]
        monkeypatch.setattr("openai.OpenAI", lambda **kwargs: mock_client)

        client = LLMClient(LLMConfig(provider="openai", api_key="k"), sleep=sleeps.append)
        result = client.complete([{"role": "user", "content": "Test"}])

        assert result.content == "after retry"
        assert sleeps == [TRANSIENT_RETRY_DELAY]

    def test_connection_error_twice_fails(self, monkeypatch):
        import openai

        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.APIConnectionError(request=MagicMock())
        monkeypatch.setattr("openai.OpenAI", lambda **kwargs: mock_client)

        client = LLMClient(LLMConfig(provider="openai", api_key="k"), sleep=lambda _: None)
        with pytest.raises(ClassificationError, match="after 2 attempts"):
            client.complete([{"role": "user", "content": "Test"}])
        assert mock_client.chat.completions.create.call_count == 2

    def test_rate_limit(self, monkeypatch):
        import openai

        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.RateLimitError(
            message="Rate limited",
            response=MagicMock(status_code=429, headers={}),
            body={"error": {"message": "Rate limited"}},
        )
        monkeypatch.setattr("openai.OpenAI", lambda **kwargs: mock_client)

        client = LLMClient(LLMConfig(provider="openai", api_key="k"))
        with pytest.raises(RateLimitedError) as excinfo:
            client.complete([{"role": "user", "content": "Test"}])
        assert excinfo.value.retry_after is None
