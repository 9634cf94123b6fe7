"""
LLM Module

Chat providers (OpenAI, Anthropic, local servers) and the threaded turn
client the question-answering agent talks to.

Usage:
    from querybot.config import get_settings
    from querybot.llm import ThreadedChatClient, create_provider

    settings = get_settings()
    client = ThreadedChatClient(create_provider(settings.llm))

    turn = await client.send_turn("Hello!")
    follow_up = await client.send_turn("And then?", turn.turn_id)
"""

from querybot.llm.anthropic import AnthropicChatProvider
from querybot.llm.base import ChatProvider
from querybot.llm.conversation import ThreadedChatClient
from querybot.llm.factory import create_provider
from querybot.llm.local import LocalChatProvider
from querybot.llm.models import ChatMessage, Completion, LLMTurn
from querybot.llm.openai import OpenAIChatProvider

__all__ = [
    "AnthropicChatProvider",
    "ChatMessage",
    "ChatProvider",
    "Completion",
    "LLMTurn",
    "LocalChatProvider",
    "OpenAIChatProvider",
    "ThreadedChatClient",
    "create_provider",
]
