"""
Threaded Chat Client

Turn-based transport over any ChatProvider. Each reply gets an opaque
turn id; sending a prompt linked to a previous turn id replays that turn's
whole message thread so the model keeps the earlier context.

Usage:
    client = ThreadedChatClient(provider)
    first = await client.send_turn("Here is the schema ...")
    follow_up = await client.send_turn("Top 5 users?", first.turn_id)
"""

import logging
import uuid

from querybot.llm.base import ChatProvider
from querybot.llm.models import ChatMessage, LLMTurn
from querybot.models.agent import LLMError

logger = logging.getLogger(__name__)


class ThreadedChatClient:
    """
    Sends prompts as turns and keeps each turn's message history in memory.

    Histories live for the lifetime of the process; nothing is evicted.
    """

    def __init__(self, provider: ChatProvider, system_prompt: str | None = None):
        self.provider = provider
        self.system_prompt = system_prompt
        self._threads: dict[str, list[ChatMessage]] = {}

    async def send_turn(self, prompt: str, previous_turn_id: str | None = None) -> LLMTurn:
        """
        Send ``prompt`` as a new turn.

        Args:
            prompt: User prompt text
            previous_turn_id: Turn to continue; None starts a fresh thread

        Returns:
            LLMTurn with the new turn id and the reply text

        Raises:
            LLMError: If previous_turn_id is unknown or the provider call fails
        """
        history = self._history_for(previous_turn_id)
        messages = [*history, ChatMessage(role="user", content=prompt)]

        completion = await self.provider.complete(messages)

        turn_id = uuid.uuid4().hex
        reply = completion.text
        # messages stays exactly as the provider received it
        self._threads[turn_id] = (
            [*messages, ChatMessage(role="assistant", content=reply)] if reply else messages
        )

        logger.debug(
            "LLM turn completed",
            extra={
                "turn_id": turn_id,
                "parent_turn_id": previous_turn_id,
                "thread_length": len(self._threads[turn_id]),
            },
        )
        return LLMTurn(turn_id=turn_id, text=reply, parent_turn_id=previous_turn_id)

    def _history_for(self, previous_turn_id: str | None) -> list[ChatMessage]:
        if previous_turn_id is None:
            if self.system_prompt:
                return [ChatMessage(role="system", content=self.system_prompt)]
            return []
        try:
            return list(self._threads[previous_turn_id])
        except KeyError:
            raise LLMError(
                agent="ThreadedChatClient",
                message=f"Unknown turn id: {previous_turn_id}",
                context={"turn_id": previous_turn_id},
            ) from None
