from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Dict, Optional, Sequence

from aurora_planner.domain.common.ports import Clock
from aurora_planner.domain.common.time import to_utc_iso
from aurora_planner.domain.reminders.ports import Notifier, ReminderMarkRepository
from aurora_planner.domain.tasks.models import Task
from aurora_planner.domain.tasks.ports import TaskRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReminderConfig:
    lead_minutes: int = 30
    window_minutes: int = 1
    mark_ttl_hours: int = 24


class ReminderService:
    """
    Upcoming-task reminders.
    A task is announced once: the mark survives restarts, expires after the TTL
    and is cleared when the task is completed or rescheduled.
    """

    def __init__(
        self,
        tasks: TaskRepository,
        marks: ReminderMarkRepository,
        clock: Clock,
        cfg: ReminderConfig = ReminderConfig(),
        display_tz: Optional[tzinfo] = None,
    ) -> None:
        self._tasks = tasks
        self._marks = marks
        self._clock = clock
        self._cfg = cfg
        self._display_tz = display_tz
        # user_id -> end of the last checked window; lost on restart
        self._checked_until: Dict[str, datetime] = {}

    async def collect_due(self, user_id: str) -> Sequence[Task]:
        """
        Tasks starting in [start, now + lead + window), marked as notified.

        start is normally now + lead. When the previous sweep ended earlier than
        that (a late tick, a long job in between), the window starts where the
        previous one ended so no task falls into the gap. Tasks already started
        are never announced.
        """
        now = self._clock.now()
        await self._marks.purge_older_than(to_utc_iso(now - timedelta(hours=self._cfg.mark_ttl_hours)))

        start = now + timedelta(minutes=self._cfg.lead_minutes)
        end = start + timedelta(minutes=self._cfg.window_minutes)
        last_end = self._checked_until.get(user_id)
        if last_end is not None and last_end < start:
            start = max(last_end, now)
        upcoming = await self._tasks.list_incomplete_between(user_id, start, end)
        self._checked_until[user_id] = end

        due: list[Task] = []
        for task in upcoming:
            if await self._marks.is_marked(user_id, task.id):
                continue
            await self._marks.mark(user_id, task.id, to_utc_iso(now))
            due.append(task)
        return due

    def format_reminder(self, task: Task) -> str:
        minutes = int((task.scheduled_date - self._clock.now()).total_seconds() // 60)
        when = task.scheduled_date
        if self._display_tz is not None:
            when = when.astimezone(self._display_tz)
        return f'Reminder: "{task.title}" starts in {minutes} minutes at {when:%H:%M}'

    async def run(self, notifier: Notifier) -> int:
        sent = 0
        for user_id in await self._tasks.list_user_ids():
            for task in await self.collect_due(user_id):
                await notifier.notify(user_id, self.format_reminder(task))
                sent += 1
        if sent:
            logger.info("Sent %d task reminders", sent)
        return sent
