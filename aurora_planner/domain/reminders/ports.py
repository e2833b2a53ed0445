from __future__ import annotations

from abc import ABC, abstractmethod


class ReminderMarkRepository(ABC):
    """Persisted "already notified" set, keyed by (user_id, task_id)."""

    @abstractmethod
    async def is_marked(self, user_id: str, task_id: str) -> bool: ...

    @abstractmethod
    async def mark(self, user_id: str, task_id: str, notified_at_iso: str) -> None: ...

    @abstractmethod
    async def clear(self, user_id: str, task_id: str) -> None: ...

    @abstractmethod
    async def purge_older_than(self, cutoff_iso: str) -> int: ...


class Notifier(ABC):
    @abstractmethod
    async def notify(self, user_id: str, text: str) -> None: ...
