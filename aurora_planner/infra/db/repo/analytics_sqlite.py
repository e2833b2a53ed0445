from __future__ import annotations

from typing import Sequence

from aurora_planner.domain.common.time import from_iso, to_utc_iso
from aurora_planner.domain.tasks.models import AnalyticsEntry
from aurora_planner.domain.tasks.ports import AnalyticsRepository
from aurora_planner.infra.db.connection import Database


class AnalyticsSqliteRepo(AnalyticsRepository):
    """task_analytics is append-only."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def append(self, entry: AnalyticsEntry) -> None:
        await self._db.execute(
            """
            INSERT INTO task_analytics(id, user_id, task_id, scheduled_time, completed_time, created_at)
            VALUES (?, ?, ?, ?, ?, ?);
            """,
            (
                entry.entry_id,
                entry.user_id,
                entry.task_id,
                to_utc_iso(entry.scheduled_time),
                to_utc_iso(entry.completed_time),
                to_utc_iso(entry.created_at),
            ),
        )

    async def recent(self, user_id: str, limit: int = 50) -> Sequence[AnalyticsEntry]:
        rows = await self._db.fetchall(
            """
            SELECT *
            FROM task_analytics
            WHERE user_id = ?
            ORDER BY created_at DESC, rowid DESC
            LIMIT ?;
            """,
            (user_id, limit),
        )
        return [
            AnalyticsEntry(
                entry_id=r["id"],
                user_id=r["user_id"],
                task_id=r["task_id"],
                scheduled_time=from_iso(r["scheduled_time"]),
                completed_time=from_iso(r["completed_time"]),
                created_at=from_iso(r["created_at"]),
            )
            for r in rows
        ]
