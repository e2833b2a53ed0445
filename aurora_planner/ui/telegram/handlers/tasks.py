from __future__ import annotations

import logging
from html import escape
from datetime import timedelta

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from aurora_planner.container import Services
from aurora_planner.domain.common.errors import DomainError
from aurora_planner.ui.telegram.handlers._common import format_task_line, send_open_tasks
from aurora_planner.ui.telegram.keyboards.mainmenu import MENU_TASKS
from aurora_planner.ui.telegram.keyboards.tasks import TASK_DONE_PREFIX
from aurora_planner.ui.telegram.utils.parsing import command_args, parse_add_args

logger = logging.getLogger(__name__)

router = Router()

LIST_DAYS = 7


@router.message(Command("tasks"))
@router.message(F.text == MENU_TASKS)
async def list_tasks(message: Message, services: Services, user_id: str):
    now = services.clock.now()
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    tasks = await services.tasks.list_tasks(user_id, start=start, end=start + timedelta(days=LIST_DAYS))
    await send_open_tasks(message, tasks, services)


@router.message(Command("add"))
async def add_task(message: Message, services: Services, user_id: str):
    try:
        new_task = parse_add_args(command_args(message.text), services.clock.now().tzinfo)
        task = await services.tasks.add_task(user_id, new_task)
    except DomainError as e:
        await message.answer(escape(str(e)))
        return
    await message.answer("Added:\n" + format_task_line(task, services))


@router.callback_query(F.data.startswith(TASK_DONE_PREFIX))
async def complete_task(cb: CallbackQuery, services: Services, user_id: str):
    task_id = cb.data[len(TASK_DONE_PREFIX):]
    try:
        task = await services.tasks.set_completed(user_id, task_id, True)
    except DomainError as e:
        await cb.answer(str(e), show_alert=True)
        return
    logger.info("Task %s completed via Telegram", task.id)
    await cb.answer("Done!")
    if cb.message:
        await cb.message.answer(f"✅ {format_task_line(task, services)}")
