from __future__ import annotations

from aiogram.types import ReplyKeyboardMarkup
from aiogram.utils.keyboard import ReplyKeyboardBuilder

MENU_TASKS = "Tasks"
MENU_ANALYZE = "Analyze"
MENU_SUGGESTIONS = "Suggestions"
MENU_INSIGHTS = "Insights"


def main_menu_kb() -> ReplyKeyboardMarkup:
    kb = ReplyKeyboardBuilder()

    kb.button(text=MENU_TASKS)
    kb.button(text=MENU_ANALYZE)
    kb.button(text=MENU_SUGGESTIONS)
    kb.button(text=MENU_INSIGHTS)

    # 2x2 grid
    kb.adjust(2, 2)

    return kb.as_markup(resize_keyboard=True, one_time_keyboard=False)
