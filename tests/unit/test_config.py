"""
Unit tests for configuration management.

Tests environment loading, defaults and validation.
"""

import pytest
from pydantic import ValidationError

from querybot.config import (
    AgentSettings,
    DatabaseSettings,
    LLMSettings,
    clear_settings_cache,
    get_settings,
)


@pytest.fixture
def clean_env(monkeypatch):
    """Environment with only an OpenAI key set and .env loading disabled."""
    for name in (
        "LLM_DEFAULT_PROVIDER",
        "LLM_ANTHROPIC_API_KEY",
        "DATABASE_URL",
        "AGENT_MAX_ROUNDS",
        "AGENT_MAX_OUTPUT_LENGTH",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("QUERYBOT_ENV_SOURCE", "environment")
    monkeypatch.setenv("LLM_OPENAI_API_KEY", "sk-test-key-1234567890")
    clear_settings_cache()
    yield monkeypatch
    clear_settings_cache()


class TestSettings:
    """Test the top-level Settings loader."""

    def test_defaults(self, clean_env):
        settings = get_settings()

        assert settings.app_name == "QueryBot"
        assert settings.llm.default_provider == "openai"
        assert settings.agent.max_rounds == 3
        assert settings.agent.max_output_length == 2600
        assert settings.database.url is None

    def test_settings_are_cached(self, clean_env):
        assert get_settings() is get_settings()

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("AGENT_MAX_ROUNDS", "5")
        clean_env.setenv("DATABASE_URL", "postgresql://user:pw@db.example.com:5432/shop")

        settings = get_settings()

        assert settings.agent.max_rounds == 5
        assert settings.database.url.host == "db.example.com"


class TestLLMSettings:
    """Test LLM settings validation."""

    def test_openai_key_prefix(self):
        with pytest.raises(ValidationError, match="must start with 'sk-'"):
            LLMSettings(_env_file=None, openai_api_key="pk-test-key-1234567890")

    def test_anthropic_key_prefix(self):
        with pytest.raises(ValidationError, match="sk-ant-"):
            LLMSettings(
                _env_file=None,
                default_provider="anthropic",
                anthropic_api_key="sk-test-key-1234567890",
            )

    def test_selected_provider_requires_key(self, monkeypatch):
        monkeypatch.delenv("LLM_ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(ValidationError, match="LLM_ANTHROPIC_API_KEY"):
            LLMSettings(_env_file=None, default_provider="anthropic")

    def test_local_provider_needs_no_key(self):
        settings = LLMSettings(_env_file=None, default_provider="local")
        assert settings.local_base_url == "http://localhost:11434"

    def test_max_tokens_bound(self):
        with pytest.raises(ValidationError, match="less than or equal to 16000"):
            LLMSettings(_env_file=None, default_provider="local", max_tokens=20000)


class TestDatabaseSettings:
    """Test database settings validation."""

    def test_empty_url_is_none(self):
        assert DatabaseSettings(_env_file=None, url="").url is None

    def test_rejects_other_schemes(self):
        with pytest.raises(ValidationError, match="postgresql scheme"):
            DatabaseSettings(_env_file=None, url="mysql://user@localhost/db")


class TestAgentSettings:
    """Test agent settings bounds."""

    def test_rounds_must_be_positive(self):
        with pytest.raises(ValidationError):
            AgentSettings(_env_file=None, max_rounds=0)

    def test_budget_lower_bound(self):
        with pytest.raises(ValidationError):
            AgentSettings(_env_file=None, max_output_length=100)
