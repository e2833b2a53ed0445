from __future__ import annotations

import json
from typing import Optional, Sequence

from aurora_planner.domain.common.time import from_iso, to_utc_iso
from aurora_planner.domain.suggestions.models import PENDING, Suggestion
from aurora_planner.domain.suggestions.ports import SuggestionRepository
from aurora_planner.infra.db.connection import Database


class SuggestionsSqliteRepo(SuggestionRepository):
    """ai_suggestions. suggestion_data is kept as JSON {title, reason, data, confidence}."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def insert(self, suggestion: Suggestion) -> None:
        await self._db.execute(
            """
            INSERT INTO ai_suggestions(id, user_id, suggestion_type, suggestion_data, status, created_at, applied_at)
            VALUES (?, ?, ?, ?, ?, ?, ?);
            """,
            (
                suggestion.id,
                suggestion.user_id,
                suggestion.suggestion_type,
                json.dumps(suggestion.suggestion_data, ensure_ascii=False),
                suggestion.status,
                to_utc_iso(suggestion.created_at),
                to_utc_iso(suggestion.applied_at) if suggestion.applied_at else None,
            ),
        )

    async def get(self, user_id: str, suggestion_id: str) -> Optional[Suggestion]:
        row = await self._db.fetchone(
            "SELECT * FROM ai_suggestions WHERE id = ? AND user_id = ?;",
            (suggestion_id, user_id),
        )
        return self._row_to_suggestion(row) if row else None

    async def list_pending(self, user_id: str) -> Sequence[Suggestion]:
        rows = await self._db.fetchall(
            """
            SELECT *
            FROM ai_suggestions
            WHERE user_id = ? AND status = ?
            ORDER BY created_at DESC, rowid DESC;
            """,
            (user_id, PENDING),
        )
        return [self._row_to_suggestion(r) for r in rows]

    async def transition(
        self,
        user_id: str,
        suggestion_id: str,
        from_status: str,
        to_status: str,
        applied_at_iso: Optional[str] = None,
    ) -> bool:
        changed = await self._db.execute(
            """
            UPDATE ai_suggestions
            SET status = ?, applied_at = ?
            WHERE id = ? AND user_id = ? AND status = ?;
            """,
            (to_status, applied_at_iso, suggestion_id, user_id, from_status),
        )
        return changed == 1

    def _row_to_suggestion(self, row) -> Suggestion:
        payload = json.loads(row["suggestion_data"] or "{}")
        return Suggestion(
            id=row["id"],
            user_id=row["user_id"],
            suggestion_type=row["suggestion_type"],
            title=payload.get("title", ""),
            reason=payload.get("reason", ""),
            data=payload.get("data") or {},
            confidence=float(payload.get("confidence", 0.0)),
            status=row["status"],
            created_at=from_iso(row["created_at"]),
            applied_at=from_iso(row["applied_at"]) if row["applied_at"] else None,
        )
