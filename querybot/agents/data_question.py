"""
DataQuestionAgent

Answers a natural-language question about tabular data by driving an LLM to
write SQL, running that SQL against a data source and, when it fails, trying
the data source's automatic fix before asking the model for a correction.

The loop is an explicit state machine:

    ASK_QUESTION -> INSPECT -> NOT_A_QUERY (terminal)
                            -> EXECUTE -> SUCCESS (terminal)
                                       -> AUTO_FIX -> FIXED (terminal)
                                                   -> CORRECT_AND_RETRY -> ASK_QUESTION
                                                                        -> EXHAUSTED (terminal)

ASK_QUESTION sends one prompt to the model (the question first, correction
prompts afterwards). At most ``max_rounds`` prompts are sent per question;
CORRECT_AND_RETRY moves to EXHAUSTED once that bound is reached.

Usage:
    agent = DataQuestionAgent(data_source, context_index, chat_client)
    answer = await agent.answer("top 5 users", conversation_id="thread-1")
    if answer.has_result:
        print(answer.rows)
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from querybot.agents.context_store import ConversationContextStore
from querybot.agents.extractor import extract_code_block
from querybot.datasource.base import DataSource, QueryExecutionError
from querybot.indexes.base import ContextIndex
from querybot.llm.models import LLMTurn
from querybot.models.agent import Answer
from querybot.prompts.loader import PromptLoader

logger = logging.getLogger(__name__)

MAX_ROUNDS = 3
NO_QUERY_PLACEHOLDER = "Could not extract query"
QUERY_PREFIXES = ("SELECT", "WITH")


class TurnSender(Protocol):
    async def send_turn(self, prompt: str, previous_turn_id: str | None = None) -> LLMTurn:
        ...


class LoopState(str, Enum):
    ASK_QUESTION = "ask_question"
    INSPECT = "inspect"
    EXECUTE = "execute"
    AUTO_FIX = "auto_fix"
    CORRECT_AND_RETRY = "correct_and_retry"
    SUCCESS = "success"
    FIXED = "fixed"
    NOT_A_QUERY = "not_a_query"
    EXHAUSTED = "exhausted"


TERMINAL_STATES = frozenset(
    {LoopState.SUCCESS, LoopState.FIXED, LoopState.NOT_A_QUERY, LoopState.EXHAUSTED}
)


@dataclass
class LoopRun:
    """Mutable state of one ``answer`` call."""

    question: str
    conversation_id: str
    pending_prompt: str
    rounds: int = 0
    response: LLMTurn | None = None
    query: str = ""
    last_error: str | None = None
    answer: Answer | None = None
    trail: list[LoopState] = field(default_factory=list)


class DataQuestionAgent:
    """
    Question-answering orchestration loop.

    Every external call (readiness wait, index lookup, LLM turn, query
    execution, auto-fix) is awaited in order; nothing within one ``answer``
    call runs concurrently. Exceptions other than ``QueryExecutionError``
    propagate to the caller unchanged.
    """

    def __init__(
        self,
        data_source: DataSource,
        context_index: ContextIndex,
        chat_client: TurnSender,
        context_store: ConversationContextStore | None = None,
        max_rounds: int = MAX_ROUNDS,
        prompts: PromptLoader | None = None,
    ):
        if max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")

        self.data_source = data_source
        self.context_index = context_index
        self.chat_client = chat_client
        self.context_store = context_store or ConversationContextStore()
        self.max_rounds = max_rounds
        self.prompts = prompts or PromptLoader()
        self.last_run: LoopRun | None = None

        self._transitions: dict[LoopState, Callable[[LoopRun], Awaitable[LoopState]]] = {
            LoopState.ASK_QUESTION: self._ask_question,
            LoopState.INSPECT: self._inspect,
            LoopState.EXECUTE: self._execute,
            LoopState.AUTO_FIX: self._auto_fix,
            LoopState.CORRECT_AND_RETRY: self._correct_and_retry,
        }

    async def answer(self, question: str, conversation_id: str) -> Answer:
        """
        Answer ``question`` within the conversation ``conversation_id``.

        Returns:
            Answer with rows on success; without rows and without ``err`` when
            the model gave no usable query; without rows and with ``err`` when
            every attempt failed.
        """
        await self.data_source.await_ready()

        related_table_ids = await self.context_index.search(question)

        await self.context_store.ensure_context(
            conversation_id,
            lambda: self.data_source.get_context_prompt(related_table_ids),
            self.chat_client.send_turn,
        )

        question_prompt = self.data_source.get_question_prompt(question)
        logger.debug(f"Question prompt:\n{question_prompt}")

        run = LoopRun(
            question=question,
            conversation_id=conversation_id,
            pending_prompt=question_prompt,
        )
        self.last_run = run

        state = LoopState.ASK_QUESTION
        while state not in TERMINAL_STATES:
            run.trail.append(state)
            state = await self._transitions[state](run)
        run.trail.append(state)

        return self._finish(state, run)

    async def _ask_question(self, run: LoopRun) -> LoopState:
        run.rounds += 1
        run.response = await self.chat_client.send_turn(
            run.pending_prompt,
            self.context_store.last_turn(run.conversation_id),
        )
        logger.debug(f"Response: {run.response.text}")
        return LoopState.INSPECT

    async def _inspect(self, run: LoopRun) -> LoopState:
        self.context_store.record_turn(run.conversation_id, run.response.turn_id)

        code = extract_code_block(run.response.text)
        logger.debug(f"Extracted query: {code or ''}")

        if code is None or not code.strip().startswith(QUERY_PREFIXES):
            return LoopState.NOT_A_QUERY

        run.query = code.strip()
        return LoopState.EXECUTE

    async def _execute(self, run: LoopRun) -> LoopState:
        logger.info(
            f"Fetched query to execute for question: {run.question}. Query: \n{run.query}",
            extra={"conversation_id": run.conversation_id, "round": run.rounds},
        )
        try:
            rows = await self.data_source.run_query(run.query)
        except QueryExecutionError as err:
            run.last_error = str(err)
            logger.warning(
                f"Error running query: {err}",
                extra={"conversation_id": run.conversation_id, "round": run.rounds},
            )
            return LoopState.AUTO_FIX

        run.answer = Answer(query=run.query, has_result=True, rows=rows)
        return LoopState.SUCCESS

    async def _auto_fix(self, run: LoopRun) -> LoopState:
        fixed = await self.data_source.try_fix_and_run(run.query)
        if fixed.has_result:
            logger.info(
                "Automatic fix succeeded",
                extra={"conversation_id": run.conversation_id, "query": fixed.query},
            )
            run.answer = fixed
            return LoopState.FIXED
        return LoopState.CORRECT_AND_RETRY

    async def _correct_and_retry(self, run: LoopRun) -> LoopState:
        if run.rounds >= self.max_rounds:
            return LoopState.EXHAUSTED

        run.pending_prompt = self.prompts.render(
            "agents/sql_correction.md",
            query=run.query,
            error=run.last_error,
        )
        logger.debug(f"Error prompt: {run.pending_prompt}")
        return LoopState.ASK_QUESTION

    def _finish(self, state: LoopState, run: LoopRun) -> Answer:
        if state in (LoopState.SUCCESS, LoopState.FIXED):
            return run.answer

        logger.info(
            f"Not able to generate query for question: {run.question}. "
            f"Last response: {run.response.text if run.response else ''}, "
            f"last error: {run.last_error}",
            extra={"conversation_id": run.conversation_id, "state": state.value},
        )

        if state is LoopState.NOT_A_QUERY:
            return Answer(query=run.query, has_result=False, err=run.last_error)

        return Answer(
            query=run.query or NO_QUERY_PLACEHOLDER,
            has_result=False,
            err=run.last_error,
        )
