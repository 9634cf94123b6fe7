"""OpenAI chat provider."""

from openai import AsyncOpenAI

from querybot.llm.base import ChatProvider
from querybot.llm.models import ChatMessage, Completion


class OpenAIChatProvider(ChatProvider):
    """Chat completions through the official openai SDK."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        temperature: float = 0.0,
        max_tokens: int = 2000,
        timeout: int = 30,
    ):
        super().__init__(model, temperature=temperature, max_tokens=max_tokens, timeout=timeout)
        self.client = AsyncOpenAI(api_key=api_key, timeout=float(timeout))

    async def _complete(self, messages: list[ChatMessage]) -> Completion:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[message.as_dict() for message in messages],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        choice = response.choices[0]
        usage = response.usage
        return Completion(
            text=choice.message.content or "",
            model=response.model,
            provider=self.name,
            prompt_tokens=usage.prompt_tokens if usage else 0,
            completion_tokens=usage.completion_tokens if usage else 0,
            truncated=choice.finish_reason == "length",
        )

    async def aclose(self) -> None:
        await self.client.close()
