"""
Database Connectors

Async connectors used by the connector-backed data source.
"""

from querybot.connectors.base import (
    BaseConnector,
    ColumnInfo,
    ConnectionError,
    ConnectorError,
    QueryError,
    QueryResult,
    SchemaError,
    TableInfo,
)
from querybot.connectors.postgres import PostgresConnector

__all__ = [
    "BaseConnector",
    "ColumnInfo",
    "ConnectionError",
    "ConnectorError",
    "PostgresConnector",
    "QueryError",
    "QueryResult",
    "SchemaError",
    "TableInfo",
]
