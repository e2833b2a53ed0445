from __future__ import annotations

import logging
from collections import Counter
from datetime import timezone, tzinfo
from typing import Iterable, Optional, Sequence

from aurora_planner.domain.common.ports import Clock
from aurora_planner.domain.common.time import to_utc_iso
from aurora_planner.domain.patterns.models import CATEGORY_PREFERENCE, PRODUCTIVE_HOURS, Pattern
from aurora_planner.domain.patterns.ports import PatternRepository
from aurora_planner.domain.tasks.models import AnalyticsEntry, Task
from aurora_planner.domain.tasks.ports import AnalyticsRepository, TaskRepository

logger = logging.getLogger(__name__)

# Fixed scores, not computed from the data.
PRODUCTIVE_HOURS_CONFIDENCE = 0.7
CATEGORY_PREFERENCE_CONFIDENCE = 0.8

TOP_HOURS = 3
TOP_CATEGORIES = 5
ANALYTICS_WINDOW = 50


def derive_productive_hours(
    user_id: str, entries: Iterable[AnalyticsEntry], tz: tzinfo = timezone.utc
) -> Optional[Pattern]:
    """Top completion hours by count; ties go to the earlier hour."""
    counts = Counter(e.completed_time.astimezone(tz).hour for e in entries)
    if not counts:
        return None
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    hours = [hour for hour, _ in ranked[:TOP_HOURS]]
    return Pattern(
        user_id=user_id,
        pattern_type=PRODUCTIVE_HOURS,
        pattern_data={"hours": hours},
        confidence_score=PRODUCTIVE_HOURS_CONFIDENCE,
    )


def derive_category_preference(user_id: str, tasks: Iterable[Task]) -> Optional[Pattern]:
    """Most used categories by count; ties go to the alphabetically first name."""
    counts = Counter(t.category for t in tasks if t.category)
    if not counts:
        return None
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    preferences = [{"category": cat, "count": n} for cat, n in ranked[:TOP_CATEGORIES]]
    return Pattern(
        user_id=user_id,
        pattern_type=CATEGORY_PREFERENCE,
        pattern_data={"preferences": preferences},
        confidence_score=CATEGORY_PREFERENCE_CONFIDENCE,
    )


class PatternUpdater:
    """Recomputes a user's patterns and replaces the stored rows."""

    def __init__(
        self,
        patterns: PatternRepository,
        tasks: TaskRepository,
        analytics: AnalyticsRepository,
        clock: Clock,
        tz: tzinfo = timezone.utc,
    ) -> None:
        self._patterns = patterns
        self._tasks = tasks
        self._analytics = analytics
        self._clock = clock
        self._tz = tz

    async def update(
        self,
        user_id: str,
        tasks: Optional[Sequence[Task]] = None,
        analytics: Optional[Sequence[AnalyticsEntry]] = None,
    ) -> list[Pattern]:
        if tasks is None:
            tasks = await self._tasks.list_for_user(user_id)
        if analytics is None:
            analytics = await self._analytics.recent(user_id, limit=ANALYTICS_WINDOW)

        now_iso = to_utc_iso(self._clock.now())
        written: list[Pattern] = []
        for pattern in (
            derive_productive_hours(user_id, analytics, self._tz),
            derive_category_preference(user_id, tasks),
        ):
            if pattern is None:
                continue
            await self._patterns.upsert(pattern, now_iso)
            written.append(pattern)

        logger.debug("Updated %d patterns for user %s", len(written), user_id)
        return written
