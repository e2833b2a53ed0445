from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from aurora_planner.domain.patterns.models import Pattern


class PatternRepository(ABC):
    @abstractmethod
    async def upsert(self, pattern: Pattern, now_iso: str) -> None: ...

    @abstractmethod
    async def list_for_user(self, user_id: str) -> Sequence[Pattern]: ...
