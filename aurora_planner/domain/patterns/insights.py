from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Sequence

from aurora_planner.domain.patterns.models import CATEGORY_PREFERENCE, PRODUCTIVE_HOURS, Pattern
from aurora_planner.domain.patterns.ports import PatternRepository
from aurora_planner.domain.tasks.models import AnalyticsEntry, Task
from aurora_planner.domain.tasks.ports import AnalyticsRepository, TaskRepository

INSIGHTS_ANALYTICS_WINDOW = 30
INSIGHTS_PATTERN_LIMIT = 5


@dataclass(frozen=True)
class Insights:
    completion_rate: int
    avg_delay_hours: int
    tasks_completed: int
    total_tasks: int
    pattern_lines: list[str]


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def describe_pattern(pattern: Pattern) -> str:
    if pattern.pattern_type == PRODUCTIVE_HOURS:
        hours = pattern.pattern_data.get("hours") or []
        return "You're most productive at " + ", ".join(f"{h}:00" for h in hours)
    if pattern.pattern_type == CATEGORY_PREFERENCE:
        prefs = pattern.pattern_data.get("preferences") or []
        top = prefs[0]["category"] if prefs else None
        return f'You focus most on "{top}" tasks'
    return json.dumps(pattern.pattern_data, ensure_ascii=False)


def compute_insights(
    tasks: Sequence[Task], analytics: Sequence[AnalyticsEntry], patterns: Sequence[Pattern]
) -> Insights:
    completed = sum(1 for t in tasks if t.completed)
    total = len(tasks)
    rate = _round_half_up(completed / total * 100) if total else 0

    delays = [(a.completed_time - a.scheduled_time).total_seconds() for a in analytics]
    avg_delay = _round_half_up(sum(delays) / len(delays) / 3600) if delays else 0

    ranked = sorted(patterns, key=lambda p: -p.confidence_score)[:INSIGHTS_PATTERN_LIMIT]
    return Insights(
        completion_rate=rate,
        avg_delay_hours=avg_delay,
        tasks_completed=completed,
        total_tasks=total,
        pattern_lines=[describe_pattern(p) for p in ranked],
    )


async def load_insights(
    user_id: str,
    tasks: TaskRepository,
    analytics: AnalyticsRepository,
    patterns: PatternRepository,
) -> Insights:
    return compute_insights(
        await tasks.list_for_user(user_id),
        await analytics.recent(user_id, limit=INSIGHTS_ANALYTICS_WINDOW),
        await patterns.list_for_user(user_id),
    )
