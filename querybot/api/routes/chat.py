"""
Chat Routes

FastAPI endpoint for asking questions in a conversation.
"""

import logging
import uuid

from fastapi import APIRouter

from querybot.models.agent import DataSourceError
from querybot.models.api import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/chat", response_model=ChatResponse)
async def chat(chat_request: ChatRequest) -> ChatResponse:
    """
    Answer a question and return the query, rows and a bounded table.

    Raises:
        DataSourceError: If no agent runtime is configured (mapped to 503)
    """
    from querybot.api.main import app_state

    runtime = app_state.get("runtime")
    if runtime is None:
        raise DataSourceError(
            agent="chat",
            message="QueryBot requires a target database. Set DATABASE_URL and restart.",
        )

    conversation_id = chat_request.conversation_id or f"conv_{uuid.uuid4().hex[:12]}"
    logger.info(
        f"Chat request received: {chat_request.message[:100]}...",
        extra={"conversation_id": conversation_id},
    )

    answer = await runtime.agent.answer(chat_request.message, conversation_id)

    response = ChatResponse(
        conversation_id=conversation_id,
        query=answer.query,
        has_result=answer.has_result,
        needs_clarification=answer.needs_clarification,
        error=answer.err,
        rows=answer.rows,
    )
    if answer.has_result:
        rendered = runtime.renderer.build_from_rows(answer.rows or [])
        response.table = rendered.table_text
        response.truncated_row_count = rendered.truncated_row_count
        response.csv = rendered.csv_text
    return response
