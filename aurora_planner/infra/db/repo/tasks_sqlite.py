from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from aurora_planner.domain.common.time import from_iso, to_utc_iso
from aurora_planner.domain.tasks.models import NewTask, Task
from aurora_planner.domain.tasks.ports import TaskRepository
from aurora_planner.infra.db.connection import Database

# columns update_fields may touch
_UPDATABLE = {"title", "description", "scheduled_date", "completed", "priority", "category", "is_outdoor"}


def _to_db(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, datetime):
        return to_utc_iso(value)
    return value


class TasksSqliteRepo(TaskRepository):
    def __init__(self, db: Database) -> None:
        self._db = db

    async def create(self, task_id: str, user_id: str, task: NewTask, now_iso: str) -> Task:
        await self._db.execute(
            """
            INSERT INTO tasks(
              id, user_id, title, description, scheduled_date, completed,
              priority, category, is_outdoor, notion_id, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, 0, ?, ?, ?, NULL, ?, ?);
            """,
            (
                task_id,
                user_id,
                task.title,
                task.description,
                to_utc_iso(task.scheduled_date),
                task.priority,
                task.category,
                int(task.is_outdoor),
                now_iso,
                now_iso,
            ),
        )
        return await self._require(user_id, task_id)

    async def import_external(
        self, task_id: str, user_id: str, notion_id: str, task: NewTask, now_iso: str
    ) -> Optional[Task]:
        inserted = await self._db.execute(
            """
            INSERT INTO tasks(
              id, user_id, title, description, scheduled_date, completed,
              priority, category, is_outdoor, notion_id, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, 0, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id, notion_id) DO NOTHING;
            """,
            (
                task_id,
                user_id,
                task.title,
                task.description,
                to_utc_iso(task.scheduled_date),
                task.priority,
                task.category,
                int(task.is_outdoor),
                notion_id,
                now_iso,
                now_iso,
            ),
        )
        if not inserted:
            return None
        return await self._require(user_id, task_id)

    async def get(self, user_id: str, task_id: str) -> Optional[Task]:
        row = await self._db.fetchone(
            "SELECT * FROM tasks WHERE id = ? AND user_id = ?;",
            (task_id, user_id),
        )
        return self._row_to_task(row) if row else None

    async def _require(self, user_id: str, task_id: str) -> Task:
        task = await self.get(user_id, task_id)
        if task is None:
            raise RuntimeError(f"task {task_id} vanished after insert")
        return task

    async def list_for_user(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[Task]:
        sql = "SELECT * FROM tasks WHERE user_id = ?"
        params: list[Any] = [user_id]
        if start is not None:
            sql += " AND scheduled_date >= ?"
            params.append(to_utc_iso(start))
        if end is not None:
            sql += " AND scheduled_date <= ?"
            params.append(to_utc_iso(end))
        sql += " ORDER BY scheduled_date ASC, created_at ASC;"
        rows = await self._db.fetchall(sql, params)
        return [self._row_to_task(r) for r in rows]

    async def list_incomplete_between(self, user_id: str, start: datetime, end: datetime) -> Sequence[Task]:
        rows = await self._db.fetchall(
            """
            SELECT *
            FROM tasks
            WHERE user_id = ? AND completed = 0
              AND scheduled_date >= ? AND scheduled_date < ?
            ORDER BY scheduled_date ASC;
            """,
            (user_id, to_utc_iso(start), to_utc_iso(end)),
        )
        return [self._row_to_task(r) for r in rows]

    async def list_overdue(self, now: datetime) -> Sequence[Task]:
        rows = await self._db.fetchall(
            """
            SELECT *
            FROM tasks
            WHERE completed = 0 AND scheduled_date < ?
            ORDER BY scheduled_date ASC;
            """,
            (to_utc_iso(now),),
        )
        return [self._row_to_task(r) for r in rows]

    async def list_user_ids(self) -> Sequence[str]:
        rows = await self._db.fetchall("SELECT DISTINCT user_id FROM tasks ORDER BY user_id;")
        return [r["user_id"] for r in rows]

    async def update_fields(self, user_id: str, task_id: str, fields: dict[str, Any], now_iso: str) -> bool:
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update task columns: {', '.join(sorted(unknown))}")
        if not fields:
            return await self.get(user_id, task_id) is not None

        assignments = ", ".join(f"{col} = ?" for col in fields)
        params = [_to_db(v) for v in fields.values()] + [now_iso, task_id, user_id]
        changed = await self._db.execute(
            f"UPDATE tasks SET {assignments}, updated_at = ? WHERE id = ? AND user_id = ?;",
            params,
        )
        return changed > 0

    def _row_to_task(self, row) -> Task:
        return Task(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            description=row["description"],
            scheduled_date=from_iso(row["scheduled_date"]),
            completed=bool(row["completed"]),
            priority=row["priority"],
            category=row["category"],
            is_outdoor=bool(row["is_outdoor"]),
            notion_id=row["notion_id"],
            created_at=from_iso(row["created_at"]),
            updated_at=from_iso(row["updated_at"]),
        )
