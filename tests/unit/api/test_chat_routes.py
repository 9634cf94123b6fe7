"""
Unit tests for the chat and health endpoints.

Tests request handling with a mocked agent runtime.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from querybot.api.main import app
from querybot.models.agent import Answer, LLMError
from querybot.rendering.table import TableRenderer


@pytest.fixture
def runtime():
    runtime = MagicMock()
    runtime.agent.answer = AsyncMock(
        return_value=Answer(
            query="SELECT * FROM users LIMIT 5", has_result=True, rows=[{"id": 1}]
        )
    )
    runtime.data_source.is_ready = True
    runtime.renderer = TableRenderer()
    return runtime


@pytest.fixture
def client():
    return TestClient(app)


class TestChatEndpoint:
    """Test POST /api/v1/chat."""

    def test_successful_answer(self, client, runtime):
        with patch("querybot.api.main.app_state", {"runtime": runtime}):
            response = client.post(
                "/api/v1/chat", json={"message": "top 5 users", "conversation_id": "conv-1"}
            )

        assert response.status_code == 200
        data = response.json()
        assert data["conversation_id"] == "conv-1"
        assert data["query"] == "SELECT * FROM users LIMIT 5"
        assert data["has_result"] is True
        assert data["rows"] == [{"id": 1}]
        assert data["table"] == "id\n--\n 1"
        assert data["csv"] == "id\n1"
        runtime.agent.answer.assert_awaited_once_with("top 5 users", "conv-1")

    def test_generates_conversation_id(self, client, runtime):
        with patch("querybot.api.main.app_state", {"runtime": runtime}):
            response = client.post("/api/v1/chat", json={"message": "top 5 users"})

        assert response.status_code == 200
        assert response.json()["conversation_id"].startswith("conv_")

    def test_clarification_answer(self, client, runtime):
        runtime.agent.answer.return_value = Answer(has_result=False)
        with patch("querybot.api.main.app_state", {"runtime": runtime}):
            response = client.post("/api/v1/chat", json={"message": "hmm"})

        data = response.json()
        assert data["needs_clarification"] is True
        assert data["table"] is None

    def test_empty_message_rejected(self, client, runtime):
        with patch("querybot.api.main.app_state", {"runtime": runtime}):
            response = client.post("/api/v1/chat", json={"message": ""})

        assert response.status_code == 422

    def test_missing_runtime_returns_503(self, client):
        with patch("querybot.api.main.app_state", {"runtime": None}):
            response = client.post("/api/v1/chat", json={"message": "top 5 users"})

        assert response.status_code == 503
        assert response.json()["error"] == "agent_error"

    def test_agent_error_returns_500(self, client, runtime):
        runtime.agent.answer.side_effect = LLMError(agent="ThreadedChatClient", message="boom")
        with patch("querybot.api.main.app_state", {"runtime": runtime}):
            response = client.post("/api/v1/chat", json={"message": "top 5 users"})

        assert response.status_code == 500
        assert response.json()["type"] == "LLMError"


class TestHealthEndpoint:
    """Test GET /api/v1/health."""

    def test_healthy_with_runtime(self, client, runtime):
        with patch("querybot.api.main.app_state", {"runtime": runtime}):
            response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["agent_configured"] is True

    def test_degraded_without_runtime(self, client):
        with patch("querybot.api.main.app_state", {"runtime": None}):
            response = client.get("/api/v1/health")

        assert response.json()["status"] == "degraded"
