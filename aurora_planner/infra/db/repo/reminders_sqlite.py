from __future__ import annotations

from aurora_planner.domain.reminders.ports import ReminderMarkRepository
from aurora_planner.infra.db.connection import Database


class ReminderMarksSqliteRepo(ReminderMarkRepository):
    def __init__(self, db: Database) -> None:
        self._db = db

    async def is_marked(self, user_id: str, task_id: str) -> bool:
        row = await self._db.fetchone(
            "SELECT 1 FROM task_reminders WHERE user_id = ? AND task_id = ?;",
            (user_id, task_id),
        )
        return row is not None

    async def mark(self, user_id: str, task_id: str, notified_at_iso: str) -> None:
        await self._db.execute(
            "INSERT OR REPLACE INTO task_reminders(user_id, task_id, notified_at) VALUES (?, ?, ?);",
            (user_id, task_id, notified_at_iso),
        )

    async def clear(self, user_id: str, task_id: str) -> None:
        await self._db.execute(
            "DELETE FROM task_reminders WHERE user_id = ? AND task_id = ?;",
            (user_id, task_id),
        )

    async def purge_older_than(self, cutoff_iso: str) -> int:
        return await self._db.execute("DELETE FROM task_reminders WHERE notified_at < ?;", (cutoff_iso,))
