from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional, Sequence

from aurora_planner.domain.tasks.models import AnalyticsEntry, NewTask, Task


class TaskRepository(ABC):
    @abstractmethod
    async def create(self, task_id: str, user_id: str, task: NewTask, now_iso: str) -> Task: ...

    @abstractmethod
    async def import_external(
        self, task_id: str, user_id: str, notion_id: str, task: NewTask, now_iso: str
    ) -> Optional[Task]: ...

    @abstractmethod
    async def get(self, user_id: str, task_id: str) -> Optional[Task]: ...

    @abstractmethod
    async def list_for_user(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[Task]: ...

    @abstractmethod
    async def list_incomplete_between(self, user_id: str, start: datetime, end: datetime) -> Sequence[Task]: ...

    @abstractmethod
    async def list_overdue(self, now: datetime) -> Sequence[Task]: ...

    @abstractmethod
    async def list_user_ids(self) -> Sequence[str]: ...

    @abstractmethod
    async def update_fields(self, user_id: str, task_id: str, fields: dict[str, Any], now_iso: str) -> bool: ...


class AnalyticsRepository(ABC):
    @abstractmethod
    async def append(self, entry: AnalyticsEntry) -> None: ...

    @abstractmethod
    async def recent(self, user_id: str, limit: int = 50) -> Sequence[AnalyticsEntry]: ...
