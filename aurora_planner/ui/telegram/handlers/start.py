from __future__ import annotations

from aiogram import Router
from aiogram.filters import CommandStart, Command
from aiogram.types import Message

from aurora_planner.ui.telegram.handlers._common import nav_to_menu

router = Router()

HELP_TEXT = (
    "Aurora plans your day.\n"
    "/add &lt;title&gt; | &lt;YYYY-MM-DD HH:MM&gt; [| priority] [| category]\n"
    "/tasks - open tasks for the next week\n"
    "/analyze - ask the AI for suggestions\n"
    "/suggestions - pending suggestions\n"
    "/insights - completion stats and patterns\n"
    "/token [service] - API token for the web client (service: may act for other users)"
)


@router.message(CommandStart())
async def start_cmd(message: Message):
    await nav_to_menu(message, HELP_TEXT)


@router.message(Command("menu"))
async def menu_cmd(message: Message):
    await nav_to_menu(message)
