"""
Data Source Contract

Abstract collaborator the question-answering agent drives: it exposes a
one-time readiness gate, builds the prompts that describe its tables, runs
queries and offers a best-effort automatic repair of a failing query.
"""

import asyncio
import logging
from abc import ABC, abstractmethod

from querybot.models.agent import Answer, DataSourceError, Row

logger = logging.getLogger(__name__)


class QueryExecutionError(Exception):
    """A query reached the data source and failed (bad SQL or runtime error)."""

    def __init__(self, message: str, query: str | None = None):
        self.query = query
        super().__init__(message)


class DataSource(ABC):
    """
    Base class for data sources.

    Subclasses call ``_mark_ready()`` once their initialization finishes (or
    ``_mark_ready(error)`` when it fails); ``await_ready()`` blocks until then.
    """

    def __init__(self) -> None:
        self._ready = asyncio.Event()
        self._init_error: BaseException | None = None

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set() and self._init_error is None

    async def await_ready(self) -> None:
        """
        Wait for the data source to finish initializing.

        Raises:
            DataSourceError: If initialization failed
        """
        await self._ready.wait()
        if self._init_error is not None:
            raise DataSourceError(
                agent=self.__class__.__name__,
                message=f"Data source failed to initialize: {self._init_error}",
            ) from self._init_error

    def _mark_ready(self, error: BaseException | None = None) -> None:
        self._init_error = error
        self._ready.set()

    @abstractmethod
    def get_table_ids(self) -> list[str]:
        """Unique ids of every table the data source knows about."""

    @abstractmethod
    def get_context_prompt(self, related_table_ids: list[str]) -> str:
        """Prompt establishing schema background for the given tables."""

    @abstractmethod
    def get_question_prompt(self, question: str) -> str:
        """Prompt asking the model to answer ``question`` with a query."""

    @abstractmethod
    async def run_query(self, query: str) -> list[Row]:
        """
        Execute ``query`` and return its rows.

        Raises:
            QueryExecutionError: If the query fails
        """

    @abstractmethod
    async def try_fix_and_run(self, query: str) -> Answer:
        """Attempt an automatic repair of ``query`` and run the result."""
