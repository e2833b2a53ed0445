from __future__ import annotations

import hashlib
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from aurora_planner.domain.common.errors import AuthenticationError, AuthorizationError
from aurora_planner.domain.common.ports import Clock
from aurora_planner.domain.common.time import to_utc_iso


@dataclass(frozen=True)
class Identity:
    user_id: str
    is_service: bool = False

    def acting_for(self, target_user_id: Optional[str]) -> str:
        """The user an operation runs as. Only service identities may act for someone else."""
        if not target_user_id or target_user_id == self.user_id:
            return self.user_id
        if not self.is_service:
            raise AuthorizationError("Not allowed to act for another user")
        return target_user_id


class TokenStore(ABC):
    @abstractmethod
    async def add(self, token_hash: str, user_id: str, is_service: bool, now_iso: str) -> None: ...

    @abstractmethod
    async def find(self, token_hash: str) -> Optional[Identity]: ...

    @abstractmethod
    async def revoke_all(self, user_id: str, now_iso: str) -> int: ...


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class TokenAuthenticator:
    """Bearer tokens. Only the sha256 of a token is stored."""

    def __init__(self, store: TokenStore, clock: Clock) -> None:
        self._store = store
        self._clock = clock

    async def issue(self, user_id: str, is_service: bool = False) -> str:
        token = secrets.token_urlsafe(32)
        await self._store.add(hash_token(token), user_id, is_service, to_utc_iso(self._clock.now()))
        return token

    async def revoke_all(self, user_id: str) -> int:
        return await self._store.revoke_all(user_id, to_utc_iso(self._clock.now()))

    async def authenticate(self, authorization: Optional[str]) -> Identity:
        if not authorization:
            raise AuthenticationError("No authorization header")
        scheme, _, token = authorization.strip().partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise AuthenticationError("Authentication failed")
        identity = await self._store.find(hash_token(token.strip()))
        if identity is None:
            raise AuthenticationError("Authentication failed")
        return identity
