"""
Local chat provider

Talks to a model server on the local network. Ollama's native ``/api/chat``
is tried first; servers that only speak the OpenAI wire format (vLLM,
llama.cpp) are reached through ``/v1/chat/completions``.
"""

import logging
from typing import Any

import httpx

from querybot.llm.base import ChatProvider
from querybot.llm.models import ChatMessage, Completion

logger = logging.getLogger(__name__)


class LocalChatProvider(ChatProvider):
    name = "local"

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3.1:8b",
        temperature: float = 0.0,
        max_tokens: int = 2000,
        timeout: int = 30,
    ):
        super().__init__(model, temperature=temperature, max_tokens=max_tokens, timeout=timeout)
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(base_url=self.base_url, timeout=float(timeout))
        self._openai_compatible = False

    async def _complete(self, messages: list[ChatMessage]) -> Completion:
        thread = [message.as_dict() for message in messages]
        if not self._openai_compatible:
            try:
                return await self._ollama_chat(thread)
            except httpx.HTTPStatusError as e:
                if e.response.status_code != 404:
                    raise
                logger.info(
                    f"{self.base_url} has no Ollama chat route; using /v1/chat/completions"
                )
                self._openai_compatible = True
        return await self._openai_chat(thread)

    async def _ollama_chat(self, thread: list[dict[str, str]]) -> Completion:
        body = await self._post(
            "/api/chat",
            {
                "model": self.model,
                "messages": thread,
                "stream": False,
                "options": {"temperature": self.temperature, "num_predict": self.max_tokens},
            },
        )
        return Completion(
            text=body.get("message", {}).get("content", ""),
            model=body.get("model", self.model),
            provider=self.name,
            prompt_tokens=body.get("prompt_eval_count", 0),
            completion_tokens=body.get("eval_count", 0),
            truncated=body.get("done_reason") == "length",
        )

    async def _openai_chat(self, thread: list[dict[str, str]]) -> Completion:
        body = await self._post(
            "/v1/chat/completions",
            {
                "model": self.model,
                "messages": thread,
                "temperature": self.temperature,
                "max_tokens": self.max_tokens,
            },
        )
        choice = (body.get("choices") or [{}])[0]
        usage = body.get("usage") or {}
        return Completion(
            text=choice.get("message", {}).get("content") or "",
            model=body.get("model", self.model),
            provider=self.name,
            prompt_tokens=usage.get("prompt_tokens", 0),
            completion_tokens=usage.get("completion_tokens", 0),
            truncated=choice.get("finish_reason") == "length",
        )

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        response = await self.client.post(path, json=payload)
        response.raise_for_status()
        return response.json()

    async def aclose(self) -> None:
        await self.client.aclose()
