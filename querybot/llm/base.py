"""
Chat Provider Contract

Every provider turns a message thread into one ``Completion``. Subclasses
implement ``_complete``; callers use ``complete``, which logs the exchange
and converts transport failures into ``LLMError``.
"""

import logging
import time
from abc import ABC, abstractmethod

from querybot.llm.models import ChatMessage, Completion
from querybot.models.agent import LLMError

logger = logging.getLogger(__name__)


class ChatProvider(ABC):
    """
    Base class for chat providers.

    Attributes:
        name: Provider identifier used in logs and errors
        model: Model every request is sent to
        temperature: Sampling temperature
        max_tokens: Reply token limit
        timeout: Request timeout in seconds
    """

    name = "base"

    def __init__(
        self,
        model: str,
        temperature: float = 0.0,
        max_tokens: int = 2000,
        timeout: int = 30,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

        logger.info(
            f"{self.name} provider ready with model: {model}",
            extra={"provider": self.name, "model": model, "temperature": temperature},
        )

    async def complete(self, messages: list[ChatMessage]) -> Completion:
        """
        Send ``messages`` and return the model's reply.

        Raises:
            LLMError: If the provider call fails for any reason
        """
        started = time.perf_counter()
        try:
            completion = await self._complete(messages)
        except Exception as e:
            logger.error(f"{self.name} request failed: {e}", extra={"provider": self.name})
            raise LLMError(
                agent=self.__class__.__name__,
                message=f"{self.name} request failed: {e}",
                context={"model": self.model, "message_count": len(messages)},
            ) from e

        logger.debug(
            f"{self.name} reply in {(time.perf_counter() - started) * 1000:.0f}ms",
            extra={
                "provider": self.name,
                "model": completion.model,
                "total_tokens": completion.total_tokens,
                "truncated": completion.truncated,
            },
        )
        return completion

    @abstractmethod
    async def _complete(self, messages: list[ChatMessage]) -> Completion:
        """Provider-specific request; may raise any SDK or transport error."""

    async def aclose(self) -> None:
        """Release network resources held by the provider."""
