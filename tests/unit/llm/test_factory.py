"""
Unit tests for provider selection.
"""

import pytest

from querybot.config import LLMSettings
from querybot.llm.anthropic import AnthropicChatProvider
from querybot.llm.factory import create_provider
from querybot.llm.local import LocalChatProvider
from querybot.llm.openai import OpenAIChatProvider


class TestCreateProvider:
    """Test create_provider."""

    def test_creates_openai_provider(self):
        config = LLMSettings(
            _env_file=None,
            default_provider="openai",
            openai_api_key="sk-test-key-1234567890",
            openai_model="gpt-4o-mini",
        )

        provider = create_provider(config)

        assert isinstance(provider, OpenAIChatProvider)
        assert provider.model == "gpt-4o-mini"

    def test_creates_anthropic_provider(self):
        config = LLMSettings(
            _env_file=None,
            default_provider="anthropic",
            anthropic_api_key="sk-ant-test-key-1234567890",
        )

        assert isinstance(create_provider(config), AnthropicChatProvider)

    def test_creates_local_provider_without_key(self):
        config = LLMSettings(_env_file=None, default_provider="local", temperature=0.5)

        provider = create_provider(config)

        assert isinstance(provider, LocalChatProvider)
        assert provider.temperature == 0.5

    def test_explicit_type_overrides_default(self):
        config = LLMSettings(
            _env_file=None,
            default_provider="local",
            openai_api_key="sk-test-key-1234567890",
        )

        assert isinstance(create_provider(config, "openai"), OpenAIChatProvider)

    def test_unknown_provider_raises(self):
        config = LLMSettings(_env_file=None, default_provider="local")

        with pytest.raises(ValueError, match="Unknown provider type"):
            create_provider(config, "nonexistent")

    def test_missing_openai_key_raises(self, monkeypatch):
        monkeypatch.delenv("LLM_OPENAI_API_KEY", raising=False)
        config = LLMSettings(_env_file=None, default_provider="local")

        with pytest.raises(ValueError, match="OpenAI API key is required"):
            create_provider(config, "openai")
