"""
Unit tests for MentionHandler.

Tests reply formatting for results, clarifications, failures and errors.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from querybot.integrations.mention import (
    CLARIFICATION_MESSAGE,
    INTERNAL_ERROR_MESSAGE,
    MentionEvent,
    MentionHandler,
)
from querybot.models.agent import Answer
from querybot.rendering.table import TableRenderer


@pytest.fixture
def agent():
    agent = MagicMock()
    agent.answer = AsyncMock()
    return agent


@pytest.fixture
def event():
    return MentionEvent(text="top 5 users", thread_id="1700000000.42")


class TestMentionHandler:
    """Test MentionHandler.handle."""

    @pytest.mark.asyncio
    async def test_result_reply(self, agent, event):
        agent.answer.return_value = Answer(
            query="SELECT * FROM users LIMIT 5", has_result=True, rows=[{"id": 1}]
        )
        handler = MentionHandler(agent)

        reply = await handler.handle(event)

        agent.answer.assert_awaited_once_with("top 5 users", "1700000000.42")
        assert reply.thread_id == "1700000000.42"
        assert "*Question:* top 5 users" in reply.text
        assert "id\n--\n 1" in reply.text
        assert "SELECT * FROM users LIMIT 5" in reply.text
        assert reply.csv == "id\n1"
        assert reply.truncated_row_count == 0

    @pytest.mark.asyncio
    async def test_truncated_result_mentions_csv(self, agent, event):
        agent.answer.return_value = Answer(
            query="SELECT n FROM t", has_result=True, rows=[{"n": "aaaa"}] * 5
        )
        handler = MentionHandler(agent, TableRenderer(max_length=20))

        reply = await handler.handle(event)

        assert reply.truncated_row_count == 3
        assert "_3 more rows not shown; see the attached CSV._" in reply.text
        assert reply.csv.count("aaaa") == 5

    @pytest.mark.asyncio
    async def test_empty_result(self, agent, event):
        agent.answer.return_value = Answer(query="SELECT 1 WHERE false", has_result=True, rows=[])
        handler = MentionHandler(agent)

        reply = await handler.handle(event)

        assert "the query returned no rows" in reply.text
        assert reply.csv is None

    @pytest.mark.asyncio
    async def test_clarification_reply(self, agent, event):
        agent.answer.return_value = Answer(has_result=False)
        handler = MentionHandler(agent)

        reply = await handler.handle(event)

        assert reply.text == CLARIFICATION_MESSAGE
        assert reply.csv is None

    @pytest.mark.asyncio
    async def test_failure_reply(self, agent, event):
        agent.answer.return_value = Answer(
            query="SELECT nme FROM users", has_result=False, err='column "nme" does not exist'
        )
        handler = MentionHandler(agent)

        reply = await handler.handle(event)

        assert 'column "nme" does not exist' in reply.text
        assert "SELECT nme FROM users" in reply.text
        assert reply.answer.failed

    @pytest.mark.asyncio
    async def test_exception_becomes_internal_error(self, agent, event):
        agent.answer.side_effect = RuntimeError("LLM unavailable")
        handler = MentionHandler(agent)

        reply = await handler.handle(event)

        assert reply.text == INTERNAL_ERROR_MESSAGE
        assert reply.answer is None
