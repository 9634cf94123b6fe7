"""
Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from querybot.llm.models import LLMTurn
from querybot.models.agent import Answer

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests (requires API keys and external services)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless explicitly enabled."""
    if config.getoption("--run-integration"):
        return
    skip_integration = pytest.mark.skip(
        reason="Integration tests disabled (use --run-integration to enable)."
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def configure_test_logging(caplog):
    """Capture everything down to DEBUG for every test."""
    caplog.set_level(logging.DEBUG)
    yield


# ============================================================================
# Collaborator Fixtures
# ============================================================================


class ScriptedChatClient:
    """Chat client double that replays canned replies and records every call."""

    def __init__(self, replies: list[str]):
        self.replies = list(replies)
        self.calls: list[tuple[str, str | None]] = []

    async def send_turn(self, prompt: str, previous_turn_id: str | None = None) -> LLMTurn:
        self.calls.append((prompt, previous_turn_id))
        turn_id = f"turn-{len(self.calls)}"
        return LLMTurn(turn_id=turn_id, text=self.replies.pop(0), parent_turn_id=previous_turn_id)


@pytest.fixture
def scripted_chat_client():
    """Factory for ScriptedChatClient; the first reply answers the context prompt."""

    def _make(*replies: str) -> ScriptedChatClient:
        return ScriptedChatClient(["OK", *replies])

    return _make


@pytest.fixture
def mock_data_source():
    """Data source double that is ready and fails nothing by default."""
    data_source = MagicMock()
    data_source.await_ready = AsyncMock()
    data_source.get_table_ids = MagicMock(return_value=["public.users"])
    data_source.get_context_prompt = MagicMock(return_value="CONTEXT PROMPT")
    data_source.get_question_prompt = MagicMock(
        side_effect=lambda question: f"QUESTION PROMPT: {question}"
    )
    data_source.run_query = AsyncMock(return_value=[{"id": 1, "name": "Ada"}])
    data_source.try_fix_and_run = AsyncMock(
        side_effect=lambda query: Answer(query=query, has_result=False)
    )
    return data_source


@pytest.fixture
def mock_context_index():
    index = MagicMock()
    index.search = AsyncMock(return_value=["public.users"])
    return index
