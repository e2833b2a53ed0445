from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence

from aurora_planner.domain.common.errors import NotFoundError
from aurora_planner.domain.common.ports import Clock, IdGenerator
from aurora_planner.domain.common.time import ensure_aware, to_utc_iso
from aurora_planner.domain.reminders.ports import ReminderMarkRepository
from aurora_planner.domain.tasks.models import AnalyticsEntry, NewTask, Task
from aurora_planner.domain.tasks.ports import AnalyticsRepository, TaskRepository
from aurora_planner.domain.tasks.rules import validate_priority, validate_title

logger = logging.getLogger(__name__)


class TaskService:
    """
    Task store operations with their side effects.
    Completing a task appends an analytics entry and clears its reminder mark.
    """

    def __init__(
        self,
        tasks: TaskRepository,
        analytics: AnalyticsRepository,
        clock: Clock,
        ids: IdGenerator,
        reminder_marks: Optional[ReminderMarkRepository] = None,
    ) -> None:
        self._tasks = tasks
        self._analytics = analytics
        self._clock = clock
        self._ids = ids
        self._marks = reminder_marks

    async def add_task(self, user_id: str, task: NewTask) -> Task:
        validate_title(task.title)
        validate_priority(task.priority)
        ensure_aware(task.scheduled_date)
        now = self._clock.now()
        return await self._tasks.create(self._ids.new_id(), user_id, task, to_utc_iso(now))

    async def get_task(self, user_id: str, task_id: str) -> Task:
        task = await self._tasks.get(user_id, task_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    async def list_tasks(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[Task]:
        return await self._tasks.list_for_user(user_id, start=start, end=end)

    async def set_completed(self, user_id: str, task_id: str, completed: bool) -> Task:
        task = await self.get_task(user_id, task_id)
        if task.completed == completed:
            return task

        now = self._clock.now()
        await self._tasks.update_fields(user_id, task_id, {"completed": completed}, to_utc_iso(now))

        if completed:
            await self._analytics.append(
                AnalyticsEntry(
                    entry_id=self._ids.new_id(),
                    user_id=user_id,
                    task_id=task_id,
                    scheduled_time=task.scheduled_date,
                    completed_time=now,
                    created_at=now,
                )
            )
            if self._marks is not None:
                await self._marks.clear(user_id, task_id)

        return replace(task, completed=completed, updated_at=now)

    async def reschedule(self, user_id: str, task_id: str, new_time: datetime) -> None:
        ensure_aware(new_time)
        updated = await self._tasks.update_fields(
            user_id, task_id, {"scheduled_date": new_time}, to_utc_iso(self._clock.now())
        )
        if not updated:
            raise NotFoundError("Task not found")
        if self._marks is not None:
            # a new time means a new reminder
            await self._marks.clear(user_id, task_id)

    async def set_priority(self, user_id: str, task_id: str, priority: str) -> None:
        validate_priority(priority)
        updated = await self._tasks.update_fields(
            user_id, task_id, {"priority": priority}, to_utc_iso(self._clock.now())
        )
        if not updated:
            raise NotFoundError("Task not found")

    async def reschedule_overdue(self) -> int:
        """Move every incomplete task scheduled in the past to the next day, same clock time."""
        now = self._clock.now()
        overdue = await self._tasks.list_overdue(now)
        for task in overdue:
            await self.reschedule(task.user_id, task.id, task.scheduled_date + timedelta(days=1))
        if overdue:
            logger.info("Rescheduled %d overdue tasks to tomorrow", len(overdue))
        return len(overdue)

    async def import_tasks(self, user_id: str, items: Iterable[tuple[str, NewTask]]) -> tuple[int, int]:
        """
        Import tasks keyed by their external (Notion) id.
        Returns (imported, skipped); an id the user already has is skipped.
        """
        imported = 0
        skipped = 0
        now_iso = to_utc_iso(self._clock.now())
        for notion_id, task in items:
            validate_title(task.title)
            validate_priority(task.priority)
            created = await self._tasks.import_external(self._ids.new_id(), user_id, notion_id, task, now_iso)
            if created is None:
                skipped += 1
            else:
                imported += 1
        return imported, skipped
