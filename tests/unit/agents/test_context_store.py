"""
Unit tests for ConversationContextStore.

Tests one-time context establishment and last-turn bookkeeping.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from querybot.agents.context_store import ConversationContextStore
from querybot.llm.models import LLMTurn


class TestConversationContextStore:
    """Test ConversationContextStore."""

    @pytest.fixture
    def store(self):
        return ConversationContextStore()

    @pytest.fixture
    def send_turn(self):
        return AsyncMock(return_value=LLMTurn(turn_id="ctx-1", text="OK"))

    @pytest.mark.asyncio
    async def test_ensure_context_sends_once(self, store, send_turn):
        build_prompt = MagicMock(return_value="schema prompt")

        await store.ensure_context("conv-1", build_prompt, send_turn)
        await store.ensure_context("conv-1", build_prompt, send_turn)

        send_turn.assert_awaited_once_with("schema prompt", None)
        build_prompt.assert_called_once()
        assert store.last_turn("conv-1") == "ctx-1"

    @pytest.mark.asyncio
    async def test_conversations_are_independent(self, store, send_turn):
        await store.ensure_context("conv-1", lambda: "a", send_turn)
        await store.ensure_context("conv-2", lambda: "b", send_turn)

        assert send_turn.await_count == 2
        assert "conv-1" in store
        assert "conv-2" in store
        assert len(store) == 2

    @pytest.mark.asyncio
    async def test_failed_context_turn_records_nothing(self, store):
        send_turn = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            await store.ensure_context("conv-1", lambda: "prompt", send_turn)

        assert "conv-1" not in store

    def test_record_turn_overwrites(self, store):
        store.record_turn("conv-1", "t1")
        store.record_turn("conv-1", "t2")
        assert store.last_turn("conv-1") == "t2"

    def test_last_turn_unknown_is_none(self, store):
        assert store.last_turn("missing") is None
