"""
Conversation Context Store

Session-scoped mapping from conversation id to the id of the last LLM turn
in that conversation. Follow-up prompts are linked to the stored turn so the
model keeps the schema context and earlier answers.

Lifecycle: one store is created at process start and handed to the agent.
Entries are never evicted. Calls for distinct conversation ids never
interfere; concurrent calls for the same id are not coordinated and may both
send a context turn, with the last recorded turn winning.
"""

import logging
from collections.abc import Awaitable, Callable

from querybot.llm.models import LLMTurn

logger = logging.getLogger(__name__)

SendTurn = Callable[[str, str | None], Awaitable[LLMTurn]]


class ConversationContextStore:
    """In-memory ``conversation_id -> last_turn_id`` map."""

    def __init__(self) -> None:
        self._last_turns: dict[str, str] = {}

    def __contains__(self, conversation_id: str) -> bool:
        return conversation_id in self._last_turns

    def __len__(self) -> int:
        return len(self._last_turns)

    async def ensure_context(
        self,
        conversation_id: str,
        build_context_prompt: Callable[[], str],
        send_turn: SendTurn,
    ) -> None:
        """
        Establish model context once per conversation.

        No-op when the conversation already has a recorded turn. Otherwise the
        context prompt is built, sent as a fresh turn with no parent, and the
        returned turn id is recorded.
        """
        if conversation_id in self._last_turns:
            return

        context_prompt = build_context_prompt()
        logger.debug(f"Context prompt:\n{context_prompt}")
        response = await send_turn(context_prompt, None)
        logger.debug(f"Context prompt response:\n{response.text}")

        self._last_turns[conversation_id] = response.turn_id

    def record_turn(self, conversation_id: str, turn_id: str) -> None:
        """Overwrite the last turn id for the conversation."""
        self._last_turns[conversation_id] = turn_id

    def last_turn(self, conversation_id: str) -> str | None:
        return self._last_turns.get(conversation_id)
