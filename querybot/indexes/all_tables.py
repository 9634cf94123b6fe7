"""Context index that treats every table as relevant."""

import logging

from querybot.datasource.base import DataSource
from querybot.indexes.base import ContextIndex

logger = logging.getLogger(__name__)


class AllTablesIndex(ContextIndex):
    """
    Returns every table the data source exposes, regardless of the question.

    Suitable for small schemas where the whole schema fits in one context
    prompt.
    """

    def __init__(self, data_source: DataSource):
        self.data_source = data_source

    async def search(self, question: str) -> list[str]:
        await self.data_source.await_ready()
        table_ids = self.data_source.get_table_ids()
        logger.debug(
            f"Context index matched {len(table_ids)} tables",
            extra={"question": question[:100], "tables": len(table_ids)},
        )
        return table_ids
