"""
Agent Models

Pydantic models for the question-answering agent and its error taxonomy.
"""

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

Scalar = Union[str, int, float, bool, None]
Row = dict[str, Scalar]


class Answer(BaseModel):
    """
    Outcome of answering one natural-language question.

    ``has_result`` is True only when a query executed successfully and
    ``rows`` holds its result. ``err`` is set only on total failure, so a
    result-less answer without ``err`` means the model never produced an
    actionable query and the user should be asked for more detail.
    """

    query: str = Field(default="", description="Last query that was attempted")
    has_result: bool = Field(..., description="Whether a query executed successfully")
    err: str | None = Field(None, description="Last execution error message on failure")
    rows: list[Row] | None = Field(None, description="Result rows when has_result is True")
    assumptions: str | None = Field(
        None, description="Assumptions the model stated while answering"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "query": "SELECT * FROM users LIMIT 5",
                "has_result": True,
                "err": None,
                "rows": [{"id": 1, "name": "Ada"}],
                "assumptions": None,
            }
        }
    )

    @property
    def needs_clarification(self) -> bool:
        """No result and no error: the model reply held no usable query."""
        return not self.has_result and self.err is None

    @property
    def failed(self) -> bool:
        """No result after running out of correction attempts."""
        return not self.has_result and self.err is not None


class AgentError(Exception):
    """
    Custom exception for agent execution errors.

    Attributes:
        agent: Name of the component that raised the error
        message: Error description
        recoverable: Whether the caller can retry
        context: Additional context for debugging
    """

    def __init__(
        self,
        agent: str,
        message: str,
        recoverable: bool = True,
        context: dict[str, Any] | None = None,
    ):
        self.agent = agent
        self.message = message
        self.recoverable = recoverable
        self.context = context or {}
        super().__init__(f"[{agent}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/API responses."""
        return {
            "agent": self.agent,
            "message": self.message,
            "recoverable": self.recoverable,
            "context": self.context,
            "type": self.__class__.__name__,
        }


class LLMError(AgentError):
    """Error during an LLM turn (transport failure or broken thread)."""

    def __init__(self, agent: str, message: str, context: dict[str, Any] | None = None):
        super().__init__(agent, message, recoverable=True, context=context)


class DataSourceError(AgentError):
    """Data source is not ready or is misconfigured."""

    def __init__(
        self,
        agent: str,
        message: str,
        recoverable: bool = False,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(agent, message, recoverable=recoverable, context=context)
