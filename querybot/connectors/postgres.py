"""
PostgreSQL Connector

asyncpg-backed connector. Result values are converted to plain scalars
(str, int, float, bool, None) so rows can be rendered, serialized and
exported without knowing PostgreSQL's types.

Usage:
    connector = PostgresConnector.from_url("postgresql://user:pw@localhost/shop")
    await connector.connect()
    result = await connector.fetch("SELECT * FROM users LIMIT 5")
    await connector.close()
"""

import json
import logging
import time
from datetime import date, datetime, time as dt_time, timedelta
from decimal import Decimal
from typing import Any
from urllib.parse import unquote, urlparse

import asyncpg

from querybot.connectors.base import (
    BaseConnector,
    ColumnInfo,
    ConnectionError,
    QueryError,
    QueryResult,
    SchemaError,
    TableInfo,
)
from querybot.models.agent import Row, Scalar

logger = logging.getLogger(__name__)

_COLUMNS_SQL = """
    SELECT c.table_name, c.column_name, c.data_type, c.is_nullable
    FROM information_schema.columns c
    JOIN information_schema.tables t
        ON t.table_schema = c.table_schema AND t.table_name = c.table_name
    WHERE c.table_schema = $1
    AND t.table_type IN ('BASE TABLE', 'VIEW')
    ORDER BY c.table_name, c.ordinal_position
"""

_CONSTRAINTS_SQL = """
    SELECT
        tc.table_name,
        tc.constraint_type,
        kcu.column_name,
        ccu.table_name AS foreign_table_name,
        ccu.column_name AS foreign_column_name
    FROM information_schema.table_constraints tc
    JOIN information_schema.key_column_usage kcu
        ON tc.constraint_name = kcu.constraint_name
        AND tc.table_schema = kcu.table_schema
    LEFT JOIN information_schema.constraint_column_usage ccu
        ON ccu.constraint_name = tc.constraint_name
        AND ccu.table_schema = tc.table_schema
        AND tc.constraint_type = 'FOREIGN KEY'
    WHERE tc.table_schema = $1
    AND tc.constraint_type IN ('PRIMARY KEY', 'FOREIGN KEY')
"""

_ROW_ESTIMATES_SQL = """
    SELECT c.relname AS table_name, c.reltuples::bigint AS estimate
    FROM pg_class c
    JOIN pg_namespace n ON n.oid = c.relnamespace
    WHERE n.nspname = $1 AND c.relkind IN ('r', 'v', 'm')
"""


def to_scalar(value: Any) -> Scalar:
    """Convert a value decoded by asyncpg into a plain scalar."""
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (datetime, date, dt_time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(value, default=str)
    # UUID, network addresses, ranges, geometric types
    return str(value)


class PostgresConnector(BaseConnector):
    """PostgreSQL connector with an asyncpg connection pool."""

    dialect = "PostgreSQL"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._pool: asyncpg.Pool | None = None

    @classmethod
    def from_url(cls, url: str, pool_size: int = 5, timeout: int = 30) -> "PostgresConnector":
        parsed = urlparse(url)
        return cls(
            host=parsed.hostname or "localhost",
            port=parsed.port or 5432,
            database=parsed.path.lstrip("/") or "postgres",
            user=unquote(parsed.username or "postgres"),
            password=unquote(parsed.password or ""),
            pool_size=pool_size,
            timeout=timeout,
        )

    async def connect(self) -> None:
        if self._pool is not None:
            return

        logger.info(f"Connecting to PostgreSQL at {self.target}")
        try:
            self._pool = await asyncpg.create_pool(
                host=self.host,
                port=self.port,
                database=self.database,
                user=self.user,
                password=self.password,
                min_size=1,
                max_size=self.pool_size,
                command_timeout=self.timeout,
            )
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"PostgreSQL connection failed: {e}")
            raise ConnectionError(f"Failed to connect to PostgreSQL at {self.target}: {e}") from e

    def _require_pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise ConnectionError("Not connected to database. Call connect() first.")
        return self._pool

    async def fetch(self, query: str) -> QueryResult:
        pool = self._require_pool()
        started = time.perf_counter()

        try:
            async with pool.acquire() as conn:
                # read-only transaction; statement_timeout is in milliseconds
                async with conn.transaction(readonly=True):
                    await conn.execute(f"SET LOCAL statement_timeout = {self.timeout * 1000}")
                    records = await conn.fetch(query)
        except asyncpg.QueryCanceledError as e:
            logger.warning(f"Query cancelled after {self.timeout}s: {query[:100]}")
            raise QueryError(f"Query timeout ({self.timeout}s)") from e
        except asyncpg.PostgresError as e:
            raise QueryError(str(e)) from e

        columns = list(records[0].keys()) if records else []
        rows: list[Row] = [
            {name: to_scalar(value) for name, value in record.items()} for record in records
        ]
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(f"Query returned {len(rows)} rows in {elapsed_ms:.2f}ms")
        return QueryResult(rows=rows, columns=columns, execution_time_ms=elapsed_ms)

    async def introspect(self, schema_name: str) -> list[TableInfo]:
        pool = self._require_pool()

        try:
            async with pool.acquire() as conn:
                column_rows = await conn.fetch(_COLUMNS_SQL, schema_name)
                constraint_rows = await conn.fetch(_CONSTRAINTS_SQL, schema_name)
                estimate_rows = await conn.fetch(_ROW_ESTIMATES_SQL, schema_name)
        except asyncpg.PostgresError as e:
            logger.error(f"Schema introspection failed: {e}")
            raise SchemaError(f"Failed to introspect schema '{schema_name}': {e}") from e

        primary_keys = set()
        foreign_keys = {}
        for row in constraint_rows:
            key = (row["table_name"], row["column_name"])
            if row["constraint_type"] == "PRIMARY KEY":
                primary_keys.add(key)
            else:
                foreign_keys[key] = (row["foreign_table_name"], row["foreign_column_name"])

        # reltuples is -1 until the table is analyzed
        estimates = {
            row["table_name"]: row["estimate"]
            for row in estimate_rows
            if row["estimate"] is not None and row["estimate"] >= 0
        }

        tables: dict[str, TableInfo] = {}
        for row in column_rows:
            name = row["table_name"]
            if name not in tables:
                tables[name] = TableInfo(
                    schema=schema_name, table_name=name, row_count=estimates.get(name)
                )
            key = (name, row["column_name"])
            foreign_table, foreign_column = foreign_keys.get(key, (None, None))
            tables[name].columns.append(
                ColumnInfo(
                    name=row["column_name"],
                    data_type=row["data_type"],
                    is_nullable=row["is_nullable"] == "YES",
                    is_primary_key=key in primary_keys,
                    foreign_table=foreign_table,
                    foreign_column=foreign_column,
                )
            )

        logger.info(f"Introspected schema '{schema_name}': {len(tables)} tables")
        return list(tables.values())

    async def close(self) -> None:
        if self._pool is None:
            return
        await self._pool.close()
        self._pool = None
        logger.info("PostgreSQL connection closed")
