from __future__ import annotations

from typing import Sequence

from aiogram.types import InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from aurora_planner.domain.tasks.models import Task

TASK_DONE_PREFIX = "tk:done:"


def tasks_list_kb(tasks: Sequence[Task]) -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    for t in tasks:
        kb.button(text=f"✅ {t.title[:40]}", callback_data=f"{TASK_DONE_PREFIX}{t.id}")
    kb.adjust(1)
    return kb.as_markup()
