from __future__ import annotations

import logging

from aiogram import Bot

from aurora_planner.domain.reminders.ports import Notifier

logger = logging.getLogger(__name__)


class TelegramNotifier(Notifier):
    """User ids of bot users are their Telegram ids, so the private chat id is the user id."""

    def __init__(self, bot: Bot) -> None:
        self._bot = bot

    async def notify(self, user_id: str, text: str) -> None:
        if not user_id.lstrip("-").isdigit():
            logger.warning("Cannot deliver reminder to non-Telegram user %s", user_id)
            return
        await self._bot.send_message(chat_id=int(user_id), text=text)
