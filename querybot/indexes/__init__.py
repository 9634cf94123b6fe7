"""Context indexes used to pick the tables a question is about."""

from querybot.indexes.all_tables import AllTablesIndex
from querybot.indexes.base import ContextIndex

__all__ = ["AllTablesIndex", "ContextIndex"]
