"""
QueryBot Models Module

Pydantic models for type-safe data validation throughout the application.

Available Models:
    Agent Models:
        - Answer: Outcome of answering one question
        - Row: Single result row (column name -> scalar)
        - AgentError: Base exception for agent errors
        - LLMError: LLM transport errors
        - DataSourceError: Data source readiness/configuration errors

    API Models:
        - ChatRequest: API request model
        - ChatResponse: API response model
        - HealthResponse: Health check response
"""

from querybot.models.agent import (
    AgentError,
    Answer,
    DataSourceError,
    LLMError,
    Row,
)
from querybot.models.api import ChatRequest, ChatResponse, HealthResponse

__all__ = [
    "AgentError",
    "Answer",
    "DataSourceError",
    "LLMError",
    "Row",
    "ChatRequest",
    "ChatResponse",
    "HealthResponse",
]
