"""
Question-answering agent.

Exports:
    DataQuestionAgent: Ask/extract/execute/auto-fix/correct loop
    ConversationContextStore: conversation id -> last LLM turn id
    extract_code_block: Pull a candidate query out of model text
"""

from querybot.agents.context_store import ConversationContextStore
from querybot.agents.data_question import (
    MAX_ROUNDS,
    DataQuestionAgent,
    LoopRun,
    LoopState,
)
from querybot.agents.extractor import extract_code_block

__all__ = [
    "ConversationContextStore",
    "DataQuestionAgent",
    "LoopRun",
    "LoopState",
    "MAX_ROUNDS",
    "extract_code_block",
]
