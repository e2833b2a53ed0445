from __future__ import annotations

import json
from typing import Sequence

from aurora_planner.domain.common.time import from_iso
from aurora_planner.domain.patterns.models import Pattern
from aurora_planner.domain.patterns.ports import PatternRepository
from aurora_planner.infra.db.connection import Database


class PatternsSqliteRepo(PatternRepository):
    """One row per (user_id, pattern_type); writes replace."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def upsert(self, pattern: Pattern, now_iso: str) -> None:
        await self._db.execute(
            """
            INSERT INTO user_patterns(user_id, pattern_type, pattern_data, confidence_score, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(user_id, pattern_type) DO UPDATE SET
              pattern_data = excluded.pattern_data,
              confidence_score = excluded.confidence_score,
              updated_at = excluded.updated_at;
            """,
            (
                pattern.user_id,
                pattern.pattern_type,
                json.dumps(pattern.pattern_data, ensure_ascii=False),
                pattern.confidence_score,
                now_iso,
            ),
        )

    async def list_for_user(self, user_id: str) -> Sequence[Pattern]:
        rows = await self._db.fetchall(
            """
            SELECT *
            FROM user_patterns
            WHERE user_id = ?
            ORDER BY confidence_score DESC, pattern_type ASC;
            """,
            (user_id,),
        )
        return [
            Pattern(
                user_id=r["user_id"],
                pattern_type=r["pattern_type"],
                pattern_data=json.loads(r["pattern_data"]),
                confidence_score=float(r["confidence_score"]),
                updated_at=from_iso(r["updated_at"]),
            )
            for r in rows
        ]
