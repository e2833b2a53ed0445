from __future__ import annotations

from typing import Optional

from aurora_planner.domain.auth.service import Identity, TokenStore
from aurora_planner.infra.db.connection import Database


class TokensSqliteRepo(TokenStore):
    def __init__(self, db: Database) -> None:
        self._db = db

    async def add(self, token_hash: str, user_id: str, is_service: bool, now_iso: str) -> None:
        await self._db.execute(
            "INSERT INTO api_tokens(token_hash, user_id, is_service, created_at) VALUES (?, ?, ?, ?);",
            (token_hash, user_id, int(is_service), now_iso),
        )

    async def find(self, token_hash: str) -> Optional[Identity]:
        row = await self._db.fetchone(
            "SELECT user_id, is_service FROM api_tokens WHERE token_hash = ? AND revoked_at IS NULL;",
            (token_hash,),
        )
        if not row:
            return None
        return Identity(user_id=row["user_id"], is_service=bool(row["is_service"]))

    async def revoke_all(self, user_id: str, now_iso: str) -> int:
        return await self._db.execute(
            "UPDATE api_tokens SET revoked_at = ? WHERE user_id = ? AND revoked_at IS NULL;",
            (now_iso, user_id),
        )
