from __future__ import annotations

from datetime import datetime, timezone


def ensure_aware(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    return dt


def to_iso(dt: datetime) -> str:
    ensure_aware(dt)
    # store as ISO 8601 with offset
    return dt.isoformat()


def from_iso(s: str) -> datetime:
    return datetime.fromisoformat(s)


def parse_instant(value: str) -> datetime:
    """
    Parse an instant coming from outside (LLM payloads, API bodies).
    Accepts a trailing "Z"; naive values are read as UTC.
    """
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    dt = datetime.fromisoformat(raw)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_utc_iso(dt: datetime) -> str:
    """Fixed-width UTC form, so stored instants compare correctly as text."""
    ensure_aware(dt)
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")
