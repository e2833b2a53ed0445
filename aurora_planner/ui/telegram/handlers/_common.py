from __future__ import annotations

from html import escape
from typing import Sequence

from aiogram.types import Message

from aurora_planner.container import Services
from aurora_planner.domain.suggestions.models import Suggestion
from aurora_planner.domain.tasks.models import Task
from aurora_planner.ui.telegram.keyboards.mainmenu import main_menu_kb
from aurora_planner.ui.telegram.keyboards.suggestions import suggestion_kb
from aurora_planner.ui.telegram.keyboards.tasks import tasks_list_kb

PRIORITY_MARKS = {"high": "🔴", "medium": "🟡", "low": "🟢"}


def format_task_line(task: Task, services: Services) -> str:
    local = task.scheduled_date.astimezone(services.clock.now().tzinfo)
    mark = PRIORITY_MARKS.get(task.priority, "")
    category = f" [{escape(task.category)}]" if task.category else ""
    return f"{mark} {local:%a %d.%m %H:%M} {escape(task.title)}{category}"


def format_suggestion(s: Suggestion) -> str:
    return (
        f"<b>{escape(s.title)}</b> ({s.suggestion_type}, {s.confidence:.0%})\n"
        f"{escape(s.reason)}"
    )


async def send_open_tasks(message: Message, tasks: Sequence[Task], services: Services) -> None:
    open_tasks = [t for t in tasks if not t.completed]
    if not open_tasks:
        await message.answer("No open tasks.")
        return
    lines = "\n".join(format_task_line(t, services) for t in open_tasks)
    await message.answer(f"Open tasks:\n{lines}", reply_markup=tasks_list_kb(open_tasks))


async def send_suggestions(message: Message, suggestions: Sequence[Suggestion]) -> None:
    for s in suggestions:
        await message.answer(format_suggestion(s), reply_markup=suggestion_kb(s.id))


async def nav_to_menu(message: Message, text: str = "Choose an action.") -> None:
    await message.answer(text, reply_markup=main_menu_kb())
