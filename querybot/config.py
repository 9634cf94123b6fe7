"""
Application Configuration

Environment-driven settings, grouped by concern and validated on load.

Usage:
    from querybot.config import get_settings

    settings = get_settings()
    print(settings.llm.default_provider)
    print(settings.agent.max_rounds)

Environment Variables:
    LLM_*       provider, model, key and sampling settings (LLMSettings)
    DATABASE_*  target database and introspected schema (DatabaseSettings)
    AGENT_*     correction-round bound and table budget (AgentSettings)
    LOG_*       log level, format and optional file (LoggingSettings)
    ENVIRONMENT, APP_NAME, API_HOST, API_PORT
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import AnyUrl, Field, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ProviderName = Literal["openai", "anthropic", "local"]

# Required key prefix per hosted provider
API_KEY_PREFIXES = {
    "openai_api_key": "sk-",
    "anthropic_api_key": "sk-ant-",
}

# Third-party loggers that are noisy at DEBUG/INFO
QUIET_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "asyncpg", "asyncio")


class _EnvSettings(BaseSettings):
    """Shared loader behaviour; subclasses only pick their env prefix."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class LLMSettings(_EnvSettings):
    """Chat model provider used for every conversation turn."""

    model_config = SettingsConfigDict(env_prefix="LLM_")

    default_provider: ProviderName = Field(default="openai", description="Active provider")

    openai_api_key: str | None = Field(None, min_length=20, description="OpenAI API key")
    openai_model: str = Field(default="gpt-4o", description="OpenAI chat model")

    anthropic_api_key: str | None = Field(None, min_length=20, description="Anthropic API key")
    anthropic_model: str = Field(
        default="claude-3-5-sonnet-20241022", description="Anthropic chat model"
    )

    local_base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama or OpenAI-compatible server URL",
    )
    local_model: str = Field(default="llama3.1:8b", description="Local model name")

    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=2.0,
        description="Sampling temperature; 0 keeps generated SQL stable",
    )
    max_tokens: int = Field(default=2000, gt=0, le=16000, description="Reply token limit")
    timeout: int = Field(default=30, gt=0, description="Request timeout in seconds")
    system_prompt: str | None = Field(
        None,
        description="Optional system message placed at the start of every thread",
    )

    @field_validator("openai_api_key", "anthropic_api_key")
    @classmethod
    def validate_key_prefix(cls, v: str | None, info: ValidationInfo) -> str | None:
        prefix = API_KEY_PREFIXES[info.field_name]
        if v and not v.startswith(prefix):
            provider = info.field_name.split("_", 1)[0]
            label = "OpenAI" if provider == "openai" else "Anthropic"
            raise ValueError(f"{label} API key must start with '{prefix}'")
        return v

    @model_validator(mode="after")
    def validate_provider_key(self) -> "LLMSettings":
        """The selected hosted provider must have a key."""
        field_name = f"{self.default_provider}_api_key"
        if field_name in API_KEY_PREFIXES and not getattr(self, field_name):
            raise ValueError(
                f"API key required for {self.default_provider} provider. "
                f"Set LLM_{field_name.upper()}"
            )
        return self


class DatabaseSettings(_EnvSettings):
    """The database questions are answered against."""

    model_config = SettingsConfigDict(env_prefix="DATABASE_")

    url: AnyUrl | None = Field(None, description="postgresql:// connection URL")
    schema_name: str = Field(default="public", description="Schema described to the model")
    pool_size: int = Field(default=5, gt=0, le=20, description="Connection pool size")
    query_timeout: int = Field(default=30, gt=0, description="Statement timeout in seconds")

    @field_validator("url", mode="before")
    @classmethod
    def empty_url_is_unset(cls, v):
        return None if v == "" else v

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: AnyUrl | None) -> AnyUrl | None:
        if v is None:
            return v
        parsed = urlparse(str(v))
        if parsed.scheme.split("+")[0].lower() not in {"postgres", "postgresql"}:
            raise ValueError("DATABASE_URL must use the postgresql scheme.")
        if not parsed.hostname:
            raise ValueError("DATABASE_URL must include a host.")
        return v


class AgentSettings(_EnvSettings):
    """Question loop bound and result rendering budget."""

    model_config = SettingsConfigDict(env_prefix="AGENT_")

    max_rounds: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Model prompts per question (the question plus corrections)",
    )
    max_output_length: int = Field(
        default=2600,
        ge=200,
        le=40000,
        description="Character budget of the rendered table",
    )


class LoggingSettings(_EnvSettings):
    """Root logger configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file: Path | None = Field(default=None, description="Also log to this file")

    def configure(self) -> None:
        """Install handlers on the root logger and quiet third-party loggers."""
        handlers: list[logging.Handler] = [logging.StreamHandler()]
        if self.file:
            self.file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(self.file))

        logging.basicConfig(
            level=getattr(logging, self.level),
            format=self.format,
            datefmt=self.date_format,
            handlers=handlers,
            force=True,
        )
        quiet_third_party_loggers()


def quiet_third_party_loggers(level: int = logging.WARNING) -> None:
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(level)


class Settings(_EnvSettings):
    """
    Top-level settings.

    Example:
        >>> settings = get_settings()
        >>> settings.agent.max_rounds
        3
    """

    model_config = SettingsConfigDict(case_sensitive=False)

    environment: Literal["development", "staging", "production"] = "development"
    app_name: str = "QueryBot"
    api_host: str = "0.0.0.0"
    api_port: int = Field(default=8000, gt=0, le=65535)

    llm: LLMSettings = Field(default_factory=LLMSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    agent: AgentSettings = Field(default_factory=AgentSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @model_validator(mode="after")
    def configure_logging(self) -> "Settings":
        self.logging.configure()
        logging.getLogger(__name__).info(
            f"Settings loaded for {self.app_name} ({self.environment})",
            extra={
                "llm_provider": self.llm.default_provider,
                "max_rounds": self.agent.max_rounds,
                "database_configured": self.database.url is not None,
            },
        )
        return self


_DOTENV_PATH = Path(__file__).resolve().parents[1] / ".env"


def _apply_dotenv_precedence() -> None:
    """
    Let the project ``.env`` override the process environment.

    Set ``QUERYBOT_ENV_SOURCE=environment`` to keep exported variables
    authoritative instead.
    """
    if os.getenv("QUERYBOT_ENV_SOURCE", "dotenv").lower() not in {"dotenv", "envfile", "file"}:
        return
    if _DOTENV_PATH.exists():
        load_dotenv(_DOTENV_PATH, override=True)


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process."""
    _apply_dotenv_precedence()
    return Settings()


def clear_settings_cache() -> None:
    """Forget the cached settings so the next ``get_settings`` reloads them."""
    get_settings.cache_clear()
