"""
API Request/Response Models

Pydantic models for FastAPI endpoints.
"""

from typing import Literal

from pydantic import BaseModel, Field

from querybot.models.agent import Row


class ChatRequest(BaseModel):
    """Request model for chat endpoint."""

    message: str = Field(..., min_length=1, description="User's natural language question")
    conversation_id: str | None = Field(
        None, description="Conversation to continue; a new one is started when omitted"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "message": "top 5 users",
                "conversation_id": "conv_123",
            }
        }
    }


class ChatResponse(BaseModel):
    """Response model for chat endpoint."""

    conversation_id: str = Field(..., description="Conversation the answer belongs to")
    query: str = Field(..., description="Last attempted SQL query")
    has_result: bool = Field(..., description="Whether the query executed successfully")
    needs_clarification: bool = Field(
        ..., description="True when the model produced no usable query"
    )
    error: str | None = Field(None, description="Last execution error after all attempts failed")
    rows: list[Row] | None = Field(None, description="Result rows")
    table: str | None = Field(None, description="Fixed-width table, bounded in length")
    truncated_row_count: int = Field(0, description="Rows left out of the table")
    csv: str | None = Field(None, description="All result rows as CSV")


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "degraded"]
    version: str
    agent_configured: bool
