# -*- coding: utf-8 -*-
"""
Prompt text for the planner analysis.
Builds a deterministic summary of the user's tasks, completions and patterns.
"""
from __future__ import annotations

import json
from datetime import datetime
from typing import Sequence

from aurora_planner.domain.common.time import to_iso
from aurora_planner.domain.patterns.models import Pattern
from aurora_planner.domain.tasks.models import AnalyticsEntry, Task

RECENT_COMPLETIONS_IN_CONTEXT = 10

SYSTEM_PROMPT = (
    "You are an autonomous AI task planner agent. Analyze user behavior patterns and tasks "
    "to make intelligent suggestions.\n"
    "\n"
    "Your capabilities:\n"
    "1. Suggest new tasks based on patterns and goals\n"
    "2. Optimize task scheduling based on user preferences\n"
    "3. Reprioritize tasks based on deadlines and context\n"
    "4. Break down complex tasks into subtasks\n"
    "5. Identify time slots for maximum productivity\n"
    "\n"
    "Provide actionable, specific suggestions with reasoning.\n"
    "Payload shapes for `data` by type:\n"
    "- new_task: {title, scheduled_date (ISO 8601), description?, priority (low|medium|high)?, category?, is_outdoor?}\n"
    "- reschedule: {task_id, new_time (ISO 8601)}\n"
    "- reprioritize: {task_id, new_priority (low|medium|high)}\n"
    "- break_down: {task_id, subtasks: [string]}\n"
    "- time_block: {start (ISO 8601), end (ISO 8601), label}"
)

ANALYZE_CHECKLIST = (
    "ANALYZE:\n"
    "1. What new tasks should be suggested based on patterns?\n"
    "2. Should any tasks be rescheduled for better productivity?\n"
    "3. Should task priorities be adjusted?\n"
    "4. Should any complex tasks be broken down?\n"
    "5. What optimal time blocks can be suggested?\n"
    "\n"
    "Provide specific, actionable suggestions with high confidence scores for auto-application."
)


def _task_line(t: Task) -> str:
    return f"- [{t.priority}] {t.title} ({t.category or 'uncategorized'}) - Scheduled: {to_iso(t.scheduled_date)} (id: {t.id})"


def _completion_line(a: AnalyticsEntry) -> str:
    return f"- Completed at {to_iso(a.completed_time)} (scheduled for {to_iso(a.scheduled_time)})"


def _pattern_line(p: Pattern) -> str:
    data = json.dumps(p.pattern_data, ensure_ascii=False, sort_keys=True)
    return f"- {p.pattern_type}: {data} (confidence: {p.confidence_score})"


def build_analysis_context(
    now: datetime,
    tasks: Sequence[Task],
    patterns: Sequence[Pattern],
    analytics: Sequence[AnalyticsEntry],
) -> str:
    """
    Args:
        now: timestamp printed at the top
        tasks: all of the user's tasks
        patterns: stored patterns
        analytics: completions, newest first

    Returns:
        the user message for the planner call
    """
    incomplete = [t for t in tasks if not t.completed]
    completed_count = len(tasks) - len(incomplete)

    sections = [
        f"Current Date/Time: {to_iso(now)}",
        "",
        "TASK OVERVIEW:",
        f"- Total tasks: {len(tasks)}",
        f"- Incomplete: {len(incomplete)}",
        f"- Completed: {completed_count}",
        "",
        "INCOMPLETE TASKS:",
        *[_task_line(t) for t in incomplete],
        "",
        "RECENT COMPLETION PATTERNS:",
        *[_completion_line(a) for a in analytics[:RECENT_COMPLETIONS_IN_CONTEXT]],
        "",
        "IDENTIFIED PATTERNS:",
        *[_pattern_line(p) for p in patterns],
        "",
        ANALYZE_CHECKLIST,
    ]
    return "\n".join(sections)
