"""
Shared helpers for the async tests.

Uses a temporary DB file (in-memory SQLite would use a new DB per connection).
"""
from __future__ import annotations

import os
import tempfile
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Optional, Sequence

from aurora_planner.container import Services, build_services
from aurora_planner.domain.common.ports import Clock, IdGenerator
from aurora_planner.domain.common.time import to_utc_iso
from aurora_planner.domain.suggestions.policy import AutoApplyPolicy
from aurora_planner.domain.suggestions.ports import SuggestionGenerator
from aurora_planner.infra.db.connection import Database
from aurora_planner.infra.db.schema_version import apply_migrations

NOW = datetime(2024, 5, 6, 8, 0, tzinfo=timezone.utc)


class FixedClock(Clock):
    def __init__(self, now: datetime = NOW) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs: float) -> None:
        self._now = self._now + timedelta(**kwargs)


class SeqIds(IdGenerator):
    def __init__(self, prefix: str = "id") -> None:
        self._prefix = prefix
        self._n = 0

    def new_id(self) -> str:
        self._n += 1
        return f"{self._prefix}-{self._n}"


class FakeGenerator(SuggestionGenerator):
    """Returns canned suggestions and remembers what it was asked."""

    def __init__(self, items: Sequence[Any] = (), error: Optional[Exception] = None) -> None:
        self.items = list(items)
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def generate(self, instructions: str, context: str) -> Sequence[Any]:
        self.calls.append((instructions, context))
        if self.error is not None:
            raise self.error
        return list(self.items)


def temp_db_path() -> str:
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    return path


async def make_services(
    path: str,
    generator: Optional[SuggestionGenerator] = None,
    clock: Optional[FixedClock] = None,
    policy: AutoApplyPolicy = AutoApplyPolicy(),
) -> Services:
    db = Database(path)
    clock = clock or FixedClock()
    await apply_migrations(db, now_iso=to_utc_iso(clock.now()))
    return build_services(
        db=db,
        clock=clock,
        generator=generator or FakeGenerator(),
        ids=SeqIds(),
        policy=policy,
        tz=timezone.utc,
    )


async def run_with_services(
    test_fn: Callable[[Services], Awaitable[None]],
    generator: Optional[SuggestionGenerator] = None,
    clock: Optional[FixedClock] = None,
    policy: AutoApplyPolicy = AutoApplyPolicy(),
) -> None:
    path = temp_db_path()
    try:
        services = await make_services(path, generator=generator, clock=clock, policy=policy)
        await test_fn(services)
    finally:
        if os.path.exists(path):
            os.unlink(path)


def suggestion_item(stype: str, data: dict, confidence: float, title: str = "Suggestion") -> dict:
    return {"type": stype, "title": title, "reason": "Because of your patterns", "data": data, "confidence": confidence}
