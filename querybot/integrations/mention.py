"""
Chat Mention Integration

Typed seam between a messaging platform and the agent. Platform adapters
translate their raw event payload into a ``MentionEvent`` and post the
returned ``MentionReply`` back into the same thread; nothing here knows the
platform's own event shape.

Usage:
    handler = MentionHandler(agent)
    reply = await handler.handle(MentionEvent(text="top 5 users", thread_id="1700.42"))
    await post_message(thread=reply.thread_id, text=reply.text)
"""

import logging

from pydantic import BaseModel, Field

from querybot.agents.data_question import DataQuestionAgent
from querybot.models.agent import Answer
from querybot.rendering.table import RenderedResult, TableRenderer

logger = logging.getLogger(__name__)

CLARIFICATION_MESSAGE = "I'm sorry, I'm not sure how to answer that, can you add more details?"
INTERNAL_ERROR_MESSAGE = "An error occurred while processing your request, please try again later."


class MentionEvent(BaseModel):
    """A question addressed to the bot inside a chat thread."""

    text: str = Field(..., min_length=1, description="Question text")
    thread_id: str = Field(..., min_length=1, description="Thread the question belongs to")


class MentionReply(BaseModel):
    """Message to post back into the thread."""

    thread_id: str
    text: str
    csv: str | None = Field(None, description="Full result as CSV, for attachment")
    answer: Answer | None = None
    truncated_row_count: int = 0


class MentionHandler:
    """Answers mention events; every thread is one conversation."""

    def __init__(self, agent: DataQuestionAgent, renderer: TableRenderer | None = None):
        self.agent = agent
        self.renderer = renderer or TableRenderer()

    async def handle(self, event: MentionEvent) -> MentionReply:
        logger.debug(f"Received mention event: {event.model_dump_json()}")
        try:
            answer = await self.agent.answer(event.text, event.thread_id)
        except Exception:
            logger.exception("Failed to answer mention", extra={"thread_id": event.thread_id})
            return MentionReply(thread_id=event.thread_id, text=INTERNAL_ERROR_MESSAGE)

        if answer.needs_clarification:
            return MentionReply(thread_id=event.thread_id, text=CLARIFICATION_MESSAGE, answer=answer)

        if answer.failed:
            return MentionReply(
                thread_id=event.thread_id,
                text=format_failure(event.text, answer),
                answer=answer,
            )

        result = self.renderer.build_from_rows(answer.rows or [])
        return MentionReply(
            thread_id=event.thread_id,
            text=format_result(event.text, answer, result),
            csv=result.csv_text or None,
            answer=answer,
            truncated_row_count=result.truncated_row_count,
        )


def _question_block(question: str) -> str:
    return f"*Question:* {question}"


def _query_block(query: str) -> str:
    return f"*Query:*\n```\n{query}\n```"


def format_result(question: str, answer: Answer, result: RenderedResult) -> str:
    blocks = [_question_block(question)]
    if result.table_text:
        blocks.append(f"*Result:*\n```\n{result.table_text}\n```")
    else:
        blocks.append("*Result:* the query returned no rows.")
    if result.truncated_row_count:
        blocks.append(
            f"_{result.truncated_row_count} more rows not shown; see the attached CSV._"
        )
    if answer.assumptions:
        blocks.append(f"*Assumptions:* {answer.assumptions}")
    blocks.append(_query_block(answer.query))
    return "\n\n".join(blocks)


def format_failure(question: str, answer: Answer) -> str:
    blocks = [
        _question_block(question),
        f"*Error:* I couldn't run a working query. The last error was:\n```\n{answer.err}\n```",
    ]
    if answer.assumptions:
        blocks.append(f"*Assumptions:* {answer.assumptions}")
    blocks.append(_query_block(answer.query))
    return "\n\n".join(blocks)
