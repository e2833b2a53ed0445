# -*- coding: utf-8 -*-
"""
Suggestion records and their typed payloads.

`suggestion_data.data` is stored exactly as the model produced it. It is read
through `parse_payload`, which turns it into one payload class per
suggestion type or raises ValidationError.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Literal, Optional, Union

from aurora_planner.domain.common.errors import ValidationError
from aurora_planner.domain.common.time import parse_instant
from aurora_planner.domain.tasks.models import PRIORITIES, NewTask
from aurora_planner.domain.tasks.rules import validate_priority, validate_title

SuggestionType = Literal["new_task", "reschedule", "reprioritize", "break_down", "time_block"]
SuggestionStatus = Literal["pending", "auto_applied", "accepted", "rejected"]

SUGGESTION_TYPES: tuple[str, ...] = ("new_task", "reschedule", "reprioritize", "break_down", "time_block")

PENDING = "pending"
AUTO_APPLIED = "auto_applied"
ACCEPTED = "accepted"
REJECTED = "rejected"


@dataclass(frozen=True)
class SuggestionDraft:
    """One validated item of the model's `create_suggestion` output."""

    type: str
    title: str
    reason: str
    data: Dict[str, Any]
    confidence: float


@dataclass(frozen=True)
class Suggestion:
    id: str
    user_id: str
    suggestion_type: str
    title: str
    reason: str
    data: Dict[str, Any]
    confidence: float
    status: str
    created_at: datetime
    applied_at: Optional[datetime] = None

    @property
    def suggestion_data(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "reason": self.reason,
            "data": self.data,
            "confidence": self.confidence,
        }


# --- typed payloads ---


@dataclass(frozen=True)
class NewTaskPayload:
    task: NewTask


@dataclass(frozen=True)
class ReschedulePayload:
    task_id: str
    new_time: datetime


@dataclass(frozen=True)
class ReprioritizePayload:
    task_id: str
    new_priority: str


@dataclass(frozen=True)
class BreakDownPayload:
    task_id: Optional[str]
    subtasks: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TimeBlockPayload:
    start: Optional[datetime]
    end: Optional[datetime]
    label: Optional[str] = None


SuggestionPayload = Union[
    NewTaskPayload, ReschedulePayload, ReprioritizePayload, BreakDownPayload, TimeBlockPayload
]


def _required_str(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"Suggestion data is missing '{key}'")
    return str(value)


def _instant(data: Dict[str, Any], key: str, required: bool = True) -> Optional[datetime]:
    raw = data.get(key)
    if raw is None or raw == "":
        if required:
            raise ValidationError(f"Suggestion data is missing '{key}'")
        return None
    if not isinstance(raw, str):
        raise ValidationError(f"Suggestion data '{key}' must be an ISO 8601 string")
    try:
        return parse_instant(raw)
    except ValueError as e:
        raise ValidationError(f"Suggestion data '{key}' is not a valid datetime: {raw!r}") from e


def _flag(data: Dict[str, Any], key: str) -> bool:
    raw = data.get(key, False)
    if raw is None:
        return False
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().lower() in ("true", "false"):
        return raw.strip().lower() == "true"
    raise ValidationError(f"Suggestion data '{key}' must be true or false")


def _parse_new_task(data: Dict[str, Any]) -> NewTaskPayload:
    priority = data.get("priority") or "medium"
    description = data.get("description")
    category = data.get("category")
    task = NewTask(
        title=_required_str(data, "title"),
        scheduled_date=_instant(data, "scheduled_date"),
        description=str(description) if description else None,
        priority=priority,
        category=str(category) if category else None,
        is_outdoor=_flag(data, "is_outdoor"),
    )
    # same rules the task store applies, so a payload that parses also inserts
    validate_title(task.title)
    validate_priority(task.priority)
    return NewTaskPayload(task=task)


def _parse_reschedule(data: Dict[str, Any]) -> ReschedulePayload:
    return ReschedulePayload(
        task_id=_required_str(data, "task_id"),
        new_time=_instant(data, "new_time"),
    )


def _parse_reprioritize(data: Dict[str, Any]) -> ReprioritizePayload:
    priority = _required_str(data, "new_priority")
    if priority not in PRIORITIES:
        raise ValidationError(f"Invalid priority '{priority}'")
    return ReprioritizePayload(task_id=_required_str(data, "task_id"), new_priority=priority)


def _parse_break_down(data: Dict[str, Any]) -> BreakDownPayload:
    subtasks = data.get("subtasks") or []
    if not isinstance(subtasks, list):
        raise ValidationError("Suggestion data 'subtasks' must be a list")
    items: list[str] = []
    for s in subtasks:
        # the model sometimes sends subtasks as {"title": ...}
        if isinstance(s, dict):
            s = s.get("title", "")
        if str(s).strip():
            items.append(str(s).strip())
    task_id = data.get("task_id")
    return BreakDownPayload(task_id=str(task_id) if task_id else None, subtasks=items)


def _parse_time_block(data: Dict[str, Any]) -> TimeBlockPayload:
    label = data.get("label")
    return TimeBlockPayload(
        start=_instant(data, "start", required=False),
        end=_instant(data, "end", required=False),
        label=str(label) if label else None,
    )


_PARSERS = {
    "new_task": _parse_new_task,
    "reschedule": _parse_reschedule,
    "reprioritize": _parse_reprioritize,
    "break_down": _parse_break_down,
    "time_block": _parse_time_block,
}


def parse_payload(suggestion_type: str, data: Any) -> SuggestionPayload:
    parser = _PARSERS.get(suggestion_type)
    if parser is None:
        raise ValidationError(f"Unknown suggestion type '{suggestion_type}'")
    if not isinstance(data, dict):
        raise ValidationError("Suggestion data must be an object")
    return parser(data)


def parse_draft(raw: Any) -> SuggestionDraft:
    """Validate one raw suggestion envelope from the model."""
    if not isinstance(raw, dict):
        raise ValidationError("Suggestion must be an object")

    stype = raw.get("type")
    if stype not in SUGGESTION_TYPES:
        raise ValidationError(f"Unknown suggestion type '{stype}'")

    title = raw.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Suggestion title is required")

    reason = raw.get("reason")
    if not isinstance(reason, str):
        raise ValidationError("Suggestion reason is required")

    data = raw.get("data")
    if not isinstance(data, dict):
        raise ValidationError("Suggestion data must be an object")

    confidence = raw.get("confidence")
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        raise ValidationError("Suggestion confidence must be a number")
    if not 0.0 <= float(confidence) <= 1.0:
        raise ValidationError("Suggestion confidence must be between 0 and 1")

    return SuggestionDraft(
        type=stype,
        title=title.strip(),
        reason=reason,
        data=data,
        confidence=float(confidence),
    )
