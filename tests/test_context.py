from __future__ import annotations

from datetime import timedelta

from aurora_planner.domain.patterns.models import PRODUCTIVE_HOURS, Pattern
from aurora_planner.domain.suggestions.context import ANALYZE_CHECKLIST, build_analysis_context
from aurora_planner.domain.tasks.models import AnalyticsEntry, Task

from support import NOW


def _task(i: int, completed: bool = False, category=None) -> Task:
    return Task(
        id=f"t{i}", user_id="u1", title=f"Task {i}", description=None,
        scheduled_date=NOW + timedelta(hours=i), completed=completed, priority="high",
        category=category, is_outdoor=False, notion_id=None, created_at=NOW, updated_at=NOW,
    )


def _entry(i: int) -> AnalyticsEntry:
    return AnalyticsEntry(
        entry_id=f"a{i}", user_id="u1", task_id=None, scheduled_time=NOW - timedelta(days=i),
        completed_time=NOW - timedelta(days=i, minutes=-5), created_at=NOW,
    )


def test_context_sections_and_counts():
    tasks = [_task(1, category="Work"), _task(2, completed=True), _task(3)]
    patterns = [Pattern("u1", PRODUCTIVE_HOURS, {"hours": [9]}, 0.7)]
    text = build_analysis_context(NOW, tasks, patterns, [_entry(1)])

    assert text.startswith("Current Date/Time: 2024-05-06T08:00:00+00:00")
    assert "- Total tasks: 3" in text
    assert "- Incomplete: 2" in text
    assert "- Completed: 1" in text
    assert "- [high] Task 1 (Work) - Scheduled:" in text
    assert "(id: t1)" in text
    assert "Task 3 (uncategorized)" in text
    assert "Task 2" not in text
    assert '- productive_hours: {"hours": [9]} (confidence: 0.7)' in text
    assert text.endswith(ANALYZE_CHECKLIST)


def test_context_shows_ten_most_recent_completions():
    entries = [_entry(i) for i in range(15)]
    text = build_analysis_context(NOW, [], [], entries)
    assert text.count("- Completed at ") == 10
