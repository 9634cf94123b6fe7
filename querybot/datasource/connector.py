"""
Connector-backed Data Source

DataSource implementation over an async database connector. The schema is
introspected once during ``initialize()``; prompts are rendered from the
introspected tables and queries run through the connector.

Usage:
    connector = PostgresConnector.from_url(settings.database.url)
    data_source = ConnectorDataSource(connector, schema_name="public")
    await data_source.initialize()
"""

import logging
import re

import sqlparse

from querybot.connectors.base import BaseConnector, QueryError, TableInfo
from querybot.datasource.base import DataSource, QueryExecutionError
from querybot.models.agent import Answer, Row
from querybot.prompts.loader import PromptLoader

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```\w*\s*|\s*```$")
_TYPOGRAPHIC_QUOTES = str.maketrans({"“": '"', "”": '"', "‘": "'", "’": "'"})


def repair_query(query: str) -> str:
    """
    Apply deterministic repairs for common model formatting mistakes.

    Strips Markdown fences, turns typographic quotes into ASCII quotes and
    backtick identifiers into double-quoted ones, keeps only the first
    statement and drops its trailing semicolon.
    """
    repaired = _FENCE_RE.sub("", query.strip())
    repaired = repaired.translate(_TYPOGRAPHIC_QUOTES).replace("`", '"')

    statements = [statement.strip() for statement in sqlparse.split(repaired) if statement.strip()]
    if statements:
        repaired = statements[0]

    return repaired.rstrip().rstrip(";").rstrip()


class ConnectorDataSource(DataSource):
    """Data source that introspects and queries a database through a connector."""

    def __init__(
        self,
        connector: BaseConnector,
        schema_name: str = "public",
        prompts: PromptLoader | None = None,
    ):
        super().__init__()
        self.connector = connector
        self.schema_name = schema_name
        self.prompts = prompts or PromptLoader()
        self._tables: dict[str, TableInfo] = {}

    async def initialize(self) -> None:
        """
        Connect and introspect the schema, then open the readiness gate.

        A failure is recorded (so ``await_ready`` raises it) and re-raised.
        """
        try:
            await self.connector.connect()
            tables = await self.connector.introspect(self.schema_name)
        except Exception as e:
            logger.error(f"Data source initialization failed: {e}")
            self._mark_ready(e)
            raise

        self._tables = {table.unique_id: table for table in tables}
        logger.info(
            f"Data source ready with {len(self._tables)} tables",
            extra={"schema": self.schema_name, "tables": len(self._tables)},
        )
        self._mark_ready()

    def get_tables(self) -> list[TableInfo]:
        return list(self._tables.values())

    def get_table_ids(self) -> list[str]:
        return list(self._tables)

    def get_context_prompt(self, related_table_ids: list[str]) -> str:
        tables = [self._tables[table_id] for table_id in related_table_ids if table_id in self._tables]
        if not tables:
            tables = self.get_tables()

        return self.prompts.render(
            "datasource/context.md",
            dialect=self.connector.dialect,
            tables=[
                {
                    "id": table.unique_id,
                    "row_count": table.row_count,
                    "columns": [column.describe() for column in table.columns],
                }
                for table in tables
            ],
        )

    def get_question_prompt(self, question: str) -> str:
        return self.prompts.render(
            "datasource/question.md",
            dialect=self.connector.dialect,
            question=question,
        )

    async def run_query(self, query: str) -> list[Row]:
        try:
            result = await self.connector.fetch(query)
        except QueryError as e:
            raise QueryExecutionError(str(e), query=query) from e
        return result.rows

    async def try_fix_and_run(self, query: str) -> Answer:
        repaired = repair_query(query)
        if repaired == query.strip():
            logger.debug("No automatic fix applies to query")
            return Answer(query=query, has_result=False)

        logger.info("Running automatically repaired query", extra={"query": repaired})
        try:
            rows = await self.run_query(repaired)
        except QueryExecutionError as e:
            return Answer(query=repaired, has_result=False, err=str(e))
        return Answer(query=repaired, has_result=True, rows=rows)

    async def close(self) -> None:
        await self.connector.close()
