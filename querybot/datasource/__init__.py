"""Data sources the question-answering agent runs queries against."""

from querybot.datasource.base import DataSource, QueryExecutionError
from querybot.datasource.connector import ConnectorDataSource, repair_query

__all__ = ["ConnectorDataSource", "DataSource", "QueryExecutionError", "repair_query"]
