from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from aurora_planner.domain.suggestions.models import Suggestion


class SuggestionRepository(ABC):
    @abstractmethod
    async def insert(self, suggestion: Suggestion) -> None: ...

    @abstractmethod
    async def get(self, user_id: str, suggestion_id: str) -> Optional[Suggestion]: ...

    @abstractmethod
    async def list_pending(self, user_id: str) -> Sequence[Suggestion]: ...

    @abstractmethod
    async def transition(
        self,
        user_id: str,
        suggestion_id: str,
        from_status: str,
        to_status: str,
        applied_at_iso: Optional[str] = None,
    ) -> bool:
        """Compare-and-set on status. False when the row is not in from_status."""


class SuggestionGenerator(ABC):
    """
    The LLM behind a request/response call: instructions and context in,
    the raw `suggestions` array of the structured output out.
    Raises UpstreamError / ValidationError instead of returning partial data.
    """

    @abstractmethod
    async def generate(self, instructions: str, context: str) -> Sequence[Any]: ...
