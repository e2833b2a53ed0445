from __future__ import annotations

from aurora_planner.domain.common.errors import ValidationError
from aurora_planner.domain.tasks.models import PRIORITIES


def validate_title(title: str) -> None:
    if not title or not title.strip():
        raise ValidationError("Task title is required.")
    if len(title.strip()) > 500:
        raise ValidationError("Task title is too long (max 500 chars).")


def validate_priority(priority: str) -> None:
    if priority not in PRIORITIES:
        raise ValidationError(f"Priority must be one of {', '.join(PRIORITIES)}.")
