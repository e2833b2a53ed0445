from __future__ import annotations

import logging
from html import escape

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from aurora_planner.container import Services
from aurora_planner.domain.common.errors import DomainError
from aurora_planner.domain.suggestions.models import PENDING
from aurora_planner.ui.telegram.handlers._common import send_suggestions
from aurora_planner.ui.telegram.keyboards.mainmenu import MENU_ANALYZE, MENU_SUGGESTIONS
from aurora_planner.ui.telegram.keyboards.suggestions import (
    APPLY_PREFIX,
    REJECT_PREFIX,
    parse_suggestion_callback,
)

logger = logging.getLogger(__name__)

router = Router()


@router.message(Command("analyze"))
@router.message(F.text == MENU_ANALYZE)
async def analyze(message: Message, services: Services, user_id: str):
    await message.answer("Analyzing your tasks...")
    try:
        result = await services.engine.analyze_and_suggest(user_id)
    except DomainError as e:
        await message.answer(f"Analysis failed: {escape(str(e))}")
        return

    await message.answer(escape(result.message))
    # only materialized suggestions carry applied_at; the others are just marked
    applied = [s for s in result.suggestions if s.applied_at is not None]
    if applied:
        await message.answer(f"{len(applied)} applied to your tasks automatically.")
    await send_suggestions(message, [s for s in result.suggestions if s.status == PENDING])


@router.message(Command("suggestions"))
@router.message(F.text == MENU_SUGGESTIONS)
async def pending(message: Message, services: Services, user_id: str):
    items = await services.lifecycle.list_pending(user_id)
    if not items:
        await message.answer("No pending suggestions.")
        return
    await send_suggestions(message, items)


@router.callback_query(F.data.startswith(APPLY_PREFIX) | F.data.startswith(REJECT_PREFIX))
async def decide(cb: CallbackQuery, services: Services, user_id: str):
    parsed = parse_suggestion_callback(cb.data or "")
    if parsed is None:
        await cb.answer("Unknown action", show_alert=True)
        return

    action, suggestion_id = parsed
    try:
        if action == "apply":
            await services.lifecycle.apply_suggestion(user_id, suggestion_id)
        else:
            await services.lifecycle.reject_suggestion(user_id, suggestion_id)
    except DomainError as e:
        await cb.answer(str(e), show_alert=True)
        return

    logger.info("Suggestion %s %s via Telegram", suggestion_id, action)
    await cb.answer("Applied" if action == "apply" else "Rejected")
    if cb.message:
        await cb.message.edit_reply_markup(reply_markup=None)
