"""
Runtime assembly

Builds the agent and its collaborators from settings. Shared by the API
lifespan and the CLI.
"""

import logging
from dataclasses import dataclass

from querybot.agents.context_store import ConversationContextStore
from querybot.agents.data_question import DataQuestionAgent
from querybot.config import Settings
from querybot.connectors.postgres import PostgresConnector
from querybot.datasource.connector import ConnectorDataSource
from querybot.indexes.all_tables import AllTablesIndex
from querybot.llm.conversation import ThreadedChatClient
from querybot.llm.base import ChatProvider
from querybot.llm.factory import create_provider
from querybot.models.agent import DataSourceError
from querybot.rendering.table import TableRenderer

logger = logging.getLogger(__name__)


@dataclass
class AgentRuntime:
    agent: DataQuestionAgent
    data_source: ConnectorDataSource
    renderer: TableRenderer
    provider: ChatProvider

    async def close(self) -> None:
        await self.data_source.close()
        await self.provider.aclose()


async def create_runtime(settings: Settings) -> AgentRuntime:
    """
    Connect to the target database and wire up the agent.

    Raises:
        DataSourceError: If DATABASE_URL is not configured
    """
    if settings.database.url is None:
        raise DataSourceError(
            agent="runtime",
            message="DATABASE_URL must be set to answer questions.",
        )

    connector = PostgresConnector.from_url(
        str(settings.database.url),
        pool_size=settings.database.pool_size,
        timeout=settings.database.query_timeout,
    )
    data_source = ConnectorDataSource(connector, schema_name=settings.database.schema_name)
    await data_source.initialize()

    provider = create_provider(settings.llm)
    agent = DataQuestionAgent(
        data_source=data_source,
        context_index=AllTablesIndex(data_source),
        chat_client=ThreadedChatClient(provider, system_prompt=settings.llm.system_prompt),
        context_store=ConversationContextStore(),
        max_rounds=settings.agent.max_rounds,
    )
    logger.info(
        "Agent runtime ready",
        extra={"provider": provider.name, "max_rounds": settings.agent.max_rounds},
    )
    return AgentRuntime(
        agent=agent,
        data_source=data_source,
        renderer=TableRenderer(settings.agent.max_output_length),
        provider=provider,
    )
