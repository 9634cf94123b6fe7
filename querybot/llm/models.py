"""
Chat Models

Provider-neutral message and completion records exchanged between the
threaded chat client and the chat providers.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

Role = Literal["system", "user", "assistant"]


class ChatMessage(BaseModel):
    """One message of a conversation thread."""

    role: Role = Field(..., description="Message author")
    content: str = Field(..., min_length=1, description="Message text")

    def as_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


class Completion(BaseModel):
    """A provider's reply to a message thread."""

    text: str = Field(..., description="Reply text (may be empty)")
    model: str = Field(..., description="Model that produced the reply")
    provider: str = Field(..., description="Provider name (openai, anthropic, local)")
    prompt_tokens: int = Field(0, ge=0)
    completion_tokens: int = Field(0, ge=0)
    truncated: bool = Field(False, description="Reply stopped at the token limit")

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class LLMTurn(BaseModel):
    """One prompt/reply exchange, addressable by an opaque id."""

    turn_id: str = Field(..., description="Opaque id used to thread follow-up turns")
    text: str = Field(..., description="Model reply text")
    parent_turn_id: Optional[str] = Field(
        None,
        description="Turn this one continues (None for a fresh thread)",
    )
