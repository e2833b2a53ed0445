from __future__ import annotations

from aiogram.types import InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

APPLY_PREFIX = "sg:apply:"
REJECT_PREFIX = "sg:reject:"


def suggestion_kb(suggestion_id: str) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    kb.button(text="Accept", callback_data=f"{APPLY_PREFIX}{suggestion_id}")
    kb.button(text="Reject", callback_data=f"{REJECT_PREFIX}{suggestion_id}")
    kb.adjust(2)
    return kb.as_markup()


def parse_suggestion_callback(data: str) -> tuple[str, str] | None:
    """'sg:apply:<id>' -> ('apply', '<id>'). None for anything else."""
    for action, prefix in (("apply", APPLY_PREFIX), ("reject", REJECT_PREFIX)):
        if data.startswith(prefix) and len(data) > len(prefix):
            return action, data[len(prefix):]
    return None
