from __future__ import annotations

from datetime import timedelta

from aurora_planner.domain.patterns.insights import compute_insights, describe_pattern
from aurora_planner.domain.patterns.models import CATEGORY_PREFERENCE, PRODUCTIVE_HOURS, Pattern
from aurora_planner.domain.tasks.models import AnalyticsEntry, Task

from support import NOW


def _task(i: int, completed: bool) -> Task:
    return Task(
        id=f"t{i}", user_id="u1", title="T", description=None, scheduled_date=NOW,
        completed=completed, priority="low", category=None, is_outdoor=False,
        notion_id=None, created_at=NOW, updated_at=NOW,
    )


def _entry(delay_hours: float) -> AnalyticsEntry:
    return AnalyticsEntry(
        entry_id="a", user_id="u1", task_id=None, scheduled_time=NOW,
        completed_time=NOW + timedelta(hours=delay_hours), created_at=NOW,
    )


def test_completion_rate_and_delay_round_half_up():
    tasks = [_task(0, True), _task(1, False)]
    insights = compute_insights(tasks, [_entry(1), _entry(2)], [])
    assert insights.completion_rate == 50
    assert insights.avg_delay_hours == 2  # 1.5 rounds up
    assert insights.tasks_completed == 1
    assert insights.total_tasks == 2


def test_no_tasks_is_all_zero():
    insights = compute_insights([], [], [])
    assert insights.completion_rate == 0
    assert insights.avg_delay_hours == 0
    assert insights.pattern_lines == []


def test_pattern_descriptions_sorted_by_confidence():
    patterns = [
        Pattern("u1", PRODUCTIVE_HOURS, {"hours": [9, 14]}, 0.7),
        Pattern("u1", CATEGORY_PREFERENCE, {"preferences": [{"category": "Work", "count": 3}]}, 0.8),
    ]
    lines = compute_insights([], [], patterns).pattern_lines
    assert lines == ['You focus most on "Work" tasks', "You're most productive at 9:00, 14:00"]


def test_unknown_pattern_falls_back_to_json():
    assert describe_pattern(Pattern("u1", "other", {"a": 1}, 0.1)) == '{"a": 1}'
