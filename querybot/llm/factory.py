"""
Provider selection

Maps ``LLM_DEFAULT_PROVIDER`` to a configured ChatProvider.
"""

import logging
from collections.abc import Callable

from querybot.config import LLMSettings
from querybot.llm.anthropic import AnthropicChatProvider
from querybot.llm.base import ChatProvider
from querybot.llm.local import LocalChatProvider
from querybot.llm.openai import OpenAIChatProvider

logger = logging.getLogger(__name__)


def _openai(config: LLMSettings) -> ChatProvider:
    if not config.openai_api_key:
        raise ValueError("OpenAI API key is required but not configured")
    return OpenAIChatProvider(
        api_key=config.openai_api_key,
        model=config.openai_model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=config.timeout,
    )


def _anthropic(config: LLMSettings) -> ChatProvider:
    if not config.anthropic_api_key:
        raise ValueError("Anthropic API key is required but not configured")
    return AnthropicChatProvider(
        api_key=config.anthropic_api_key,
        model=config.anthropic_model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=config.timeout,
    )


def _local(config: LLMSettings) -> ChatProvider:
    return LocalChatProvider(
        base_url=config.local_base_url,
        model=config.local_model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=config.timeout,
    )


PROVIDER_BUILDERS: dict[str, Callable[[LLMSettings], ChatProvider]] = {
    "openai": _openai,
    "anthropic": _anthropic,
    "local": _local,
}


def create_provider(config: LLMSettings, provider_type: str | None = None) -> ChatProvider:
    """
    Build a chat provider from settings.

    Args:
        config: LLM settings
        provider_type: Overrides ``config.default_provider`` when given

    Raises:
        ValueError: If the provider type is unknown or its API key is missing
    """
    provider_type = provider_type or config.default_provider
    try:
        builder = PROVIDER_BUILDERS[provider_type]
    except KeyError:
        raise ValueError(
            f"Unknown provider type: {provider_type}. "
            f"Available providers: {sorted(PROVIDER_BUILDERS)}"
        ) from None

    logger.info(f"Creating {provider_type} provider", extra={"provider": provider_type})
    return builder(config)
