from __future__ import annotations

from html import escape

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import Message

from aurora_planner.container import Services
from aurora_planner.domain.common.errors import ValidationError
from aurora_planner.domain.patterns.insights import load_insights
from aurora_planner.ui.telegram.keyboards.mainmenu import MENU_INSIGHTS
from aurora_planner.ui.telegram.utils.parsing import command_args, parse_token_kind

router = Router()


@router.message(Command("insights"))
@router.message(F.text == MENU_INSIGHTS)
async def insights(message: Message, services: Services, user_id: str):
    result = await load_insights(
        user_id, services.tasks_repo, services.analytics_repo, services.patterns_repo
    )
    lines = [
        f"Completion rate: {result.completion_rate}% ({result.tasks_completed}/{result.total_tasks})",
        f"Average delay: {result.avg_delay_hours}h",
    ]
    if result.pattern_lines:
        lines.append("")
        lines.extend(f"• {escape(p)}" for p in result.pattern_lines)
    await message.answer("\n".join(lines))


@router.message(Command("token"))
async def token(message: Message, services: Services, user_id: str):
    """
    /token issues a personal API token, /token service one that may act for
    other users (the auto-analysis caller). Older tokens of this user are revoked.
    """
    try:
        is_service = parse_token_kind(command_args(message.text))
    except ValidationError as e:
        await message.answer(escape(str(e)))
        return

    await services.auth.revoke_all(user_id)
    raw = await services.auth.issue(user_id, is_service=is_service)
    kind = "Service token" if is_service else "API token"
    await message.answer(f"{kind} (shown once):\n<code>{escape(raw)}</code>")
