"""Anthropic chat provider."""

from anthropic import AsyncAnthropic

from querybot.llm.base import ChatProvider
from querybot.llm.models import ChatMessage, Completion


class AnthropicChatProvider(ChatProvider):
    """
    Messages API through the anthropic SDK.

    The API takes the system prompt as a separate argument, so system
    messages are lifted out of the thread before sending.
    """

    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-sonnet-20241022",
        temperature: float = 0.0,
        max_tokens: int = 2000,
        timeout: int = 30,
    ):
        super().__init__(model, temperature=temperature, max_tokens=max_tokens, timeout=timeout)
        self.client = AsyncAnthropic(api_key=api_key, timeout=float(timeout))

    async def _complete(self, messages: list[ChatMessage]) -> Completion:
        system = "\n\n".join(m.content for m in messages if m.role == "system")
        kwargs = {"system": system} if system else {}

        response = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            messages=[m.as_dict() for m in messages if m.role != "system"],
            **kwargs,
        )
        return Completion(
            text="".join(block.text for block in response.content if block.type == "text"),
            model=response.model,
            provider=self.name,
            prompt_tokens=response.usage.input_tokens,
            completion_tokens=response.usage.output_tokens,
            truncated=response.stop_reason == "max_tokens",
        )

    async def aclose(self) -> None:
        await self.client.close()
