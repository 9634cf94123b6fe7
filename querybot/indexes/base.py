"""Context index contract: selects the tables relevant to a question."""

from abc import ABC, abstractmethod


class ContextIndex(ABC):
    """Looks up the table ids a question most likely concerns."""

    @abstractmethod
    async def search(self, question: str) -> list[str]:
        """Return table ids related to ``question`` (may be empty)."""
