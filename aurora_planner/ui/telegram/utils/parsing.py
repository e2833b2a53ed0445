from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Optional

from aurora_planner.domain.common.errors import ValidationError
from aurora_planner.domain.tasks.models import NewTask, PRIORITIES

ADD_USAGE = "Usage: /add <title> | <YYYY-MM-DD HH:MM> [| priority] [| category]"
DATETIME_FORMAT = "%Y-%m-%d %H:%M"


def command_args(text: Optional[str]) -> str:
    """'/add foo | bar' -> 'foo | bar'"""
    if not text:
        return ""
    parts = text.split(maxsplit=1)
    return parts[1].strip() if len(parts) > 1 else ""


def parse_add_args(args: str, tz: tzinfo) -> NewTask:
    """
    Parse the argument string of /add. Time is local wall-clock time in `tz`.
    Raises ValidationError with a user-facing message.
    """
    parts = [p.strip() for p in args.split("|")]
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise ValidationError(ADD_USAGE)
    if len(parts) > 4:
        raise ValidationError(ADD_USAGE)

    title, when = parts[0], parts[1]
    try:
        scheduled = datetime.strptime(when, DATETIME_FORMAT).replace(tzinfo=tz)
    except ValueError as e:
        raise ValidationError(f"Bad time '{when}', expected YYYY-MM-DD HH:MM") from e

    priority = "medium"
    if len(parts) >= 3 and parts[2]:
        priority = parts[2].lower()
        if priority not in PRIORITIES:
            raise ValidationError(f"Priority must be one of {', '.join(PRIORITIES)}.")

    category = parts[3] if len(parts) == 4 and parts[3] else None

    return NewTask(title=title, scheduled_date=scheduled, priority=priority, category=category)


def parse_token_kind(args: str) -> bool:
    """'' -> personal token, 'service' -> service token."""
    kind = args.strip().lower()
    if kind in ("", "user"):
        return False
    if kind == "service":
        return True
    raise ValidationError("Usage: /token [service]")
