"""
Base Database Connector

Connector contract and the records it returns: table descriptions for the
context prompt and row sets for answers.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field

from querybot.models.agent import Row


# ============================================================================
# Data Models
# ============================================================================


class ColumnInfo(BaseModel):
    """Information about a database column."""

    name: str = Field(..., description="Column name")
    data_type: str = Field(..., description="Column data type")
    is_nullable: bool = Field(default=True, description="Whether column can be NULL")
    is_primary_key: bool = Field(default=False, description="Is part of primary key")
    foreign_table: str | None = Field(None, description="Referenced table if FK")
    foreign_column: str | None = Field(None, description="Referenced column if FK")

    def describe(self) -> str:
        """One-line DDL-style description used in the context prompt."""
        parts = [self.name, self.data_type]
        if not self.is_nullable:
            parts.append("NOT NULL")
        if self.is_primary_key:
            parts.append("PRIMARY KEY")
        if self.foreign_table:
            parts.append(f"REFERENCES {self.foreign_table}({self.foreign_column})")
        return " ".join(parts)


class TableInfo(BaseModel):
    """Information about a database table."""

    schema_name: str = Field(..., alias="schema", description="Schema name")
    table_name: str = Field(..., description="Table name")
    columns: list[ColumnInfo] = Field(default_factory=list, description="Columns in order")
    row_count: int | None = Field(None, description="Approximate row count")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def unique_id(self) -> str:
        return f"{self.schema_name}.{self.table_name}"


class QueryResult(BaseModel):
    """Result from query execution."""

    rows: list[Row] = Field(..., description="Result rows with plain scalar values")
    columns: list[str] = Field(..., description="Column names")
    execution_time_ms: float = Field(..., description="Query execution time in ms")

    @property
    def row_count(self) -> int:
        return len(self.rows)


class ConnectorError(Exception):
    """Base exception for connector errors."""


class ConnectionError(ConnectorError):
    """Error establishing or managing database connection."""


class QueryError(ConnectorError):
    """Error executing database query."""


class SchemaError(ConnectorError):
    """Error introspecting database schema."""


# ============================================================================
# Base Connector
# ============================================================================


class BaseConnector(ABC):
    """
    Async database connector.

    The data source only needs four calls: ``connect``, ``fetch``,
    ``introspect`` and ``close``. Pooling and statement timeouts stay inside
    the connector.
    """

    dialect = "SQL"

    def __init__(
        self,
        host: str,
        port: int,
        database: str,
        user: str,
        password: str,
        pool_size: int = 5,
        timeout: int = 30,
    ):
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self.pool_size = pool_size
        self.timeout = timeout

    @property
    def target(self) -> str:
        """``user@host:port/database`` for log lines (never the password)."""
        return f"{self.user}@{self.host}:{self.port}/{self.database}"

    @abstractmethod
    async def connect(self) -> None:
        """
        Open the connection pool. Calling it again is a no-op.

        Raises:
            ConnectionError: If the database cannot be reached
        """

    @abstractmethod
    async def fetch(self, query: str) -> QueryResult:
        """
        Run ``query`` and return every row as plain scalars.

        Raises:
            QueryError: If the database rejects or cancels the query
            ConnectionError: If ``connect`` was not called
        """

    @abstractmethod
    async def introspect(self, schema_name: str) -> list[TableInfo]:
        """
        Describe the tables and views of ``schema_name``.

        Raises:
            SchemaError: If the catalog queries fail
        """

    @abstractmethod
    async def close(self) -> None:
        """Close the pool. Safe to call more than once."""
