from __future__ import annotations

from typing import Any, Dict

from aurora_planner.domain.common.time import to_iso
from aurora_planner.domain.patterns.insights import Insights
from aurora_planner.domain.suggestions.models import Suggestion
from aurora_planner.domain.tasks.models import Task


def serialize_task(task: Task) -> Dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "scheduled_date": to_iso(task.scheduled_date),
        "completed": task.completed,
        "priority": task.priority,
        "category": task.category,
        "is_outdoor": task.is_outdoor,
        "notion_id": task.notion_id,
    }


def serialize_suggestion(s: Suggestion) -> Dict[str, Any]:
    return {
        "id": s.id,
        "type": s.suggestion_type,
        "title": s.title,
        "reason": s.reason,
        "data": s.data,
        "confidence": s.confidence,
        "status": s.status,
        "created_at": to_iso(s.created_at),
        "applied_at": to_iso(s.applied_at) if s.applied_at else None,
    }


def serialize_insights(insights: Insights) -> Dict[str, Any]:
    return {
        "completionRate": insights.completion_rate,
        "avgDelay": insights.avg_delay_hours,
        "tasksCompleted": insights.tasks_completed,
        "totalTasks": insights.total_tasks,
        "patterns": insights.pattern_lines,
    }
