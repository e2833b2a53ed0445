from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional

Priority = Literal["low", "medium", "high"]
PRIORITIES: tuple[str, ...] = ("low", "medium", "high")


@dataclass(frozen=True)
class Task:
    id: str
    user_id: str
    title: str
    description: Optional[str]
    scheduled_date: datetime
    completed: bool
    priority: Priority
    category: Optional[str]
    is_outdoor: bool
    notion_id: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class NewTask:
    title: str
    scheduled_date: datetime
    description: Optional[str] = None
    priority: Priority = "medium"
    category: Optional[str] = None
    is_outdoor: bool = False


@dataclass(frozen=True)
class AnalyticsEntry:
    entry_id: str
    user_id: str
    task_id: Optional[str]
    scheduled_time: datetime
    completed_time: datetime
    created_at: datetime
