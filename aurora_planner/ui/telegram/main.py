from __future__ import annotations

import asyncio
import contextlib
import logging
from pathlib import Path

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from aurora_planner.config import load_settings
from aurora_planner.container import bootstrap
from aurora_planner.infra.scheduler.loop import PeriodicLoop

from aurora_planner.ui.telegram.middlewares.auth import OwnerOnlyMiddleware
from aurora_planner.ui.telegram.middlewares.di import DIMiddleware
from aurora_planner.ui.telegram.handlers.start import router as start_router
from aurora_planner.ui.telegram.handlers.tasks import router as tasks_router
from aurora_planner.ui.telegram.handlers.suggestions import router as suggestions_router
from aurora_planner.ui.telegram.handlers.insights import router as insights_router
from aurora_planner.ui.telegram.notifier import TelegramNotifier

logger = logging.getLogger(__name__)

REMINDER_INTERVAL = 60
OVERDUE_INTERVAL = 600
SWEEP_INTERVAL = 86400


async def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - [PID:%(process)d] - %(message)s",
    )

    settings = load_settings()

    repo_root = Path(__file__).resolve().parents[3]  # .../aurora_planner/ui/telegram/main.py -> repo root
    services = await bootstrap(settings, root=repo_root)
    logger.info("DB_PATH: %s", services.db.path)

    # --- bot/dispatcher ---
    bot = Bot(
        token=settings.bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )
    dp = Dispatcher()

    # --- middlewares ---
    dp.message.middleware(OwnerOnlyMiddleware(settings.owner_telegram_id))
    dp.callback_query.middleware(OwnerOnlyMiddleware(settings.owner_telegram_id))

    dp.message.middleware(DIMiddleware(services))
    dp.callback_query.middleware(DIMiddleware(services))

    # --- routers ---
    dp.include_router(start_router)
    dp.include_router(tasks_router)
    dp.include_router(suggestions_router)
    dp.include_router(insights_router)

    # --- background jobs ---
    notifier = TelegramNotifier(bot)
    loop = PeriodicLoop()
    loop.register("reminders", REMINDER_INTERVAL, lambda: services.reminders.run(notifier))
    loop.register("reschedule_overdue", OVERDUE_INTERVAL, services.tasks.reschedule_overdue)
    loop.register(
        "analyze_all", SWEEP_INTERVAL, services.engine.analyze_all_users, run_immediately=False, background=True
    )
    loop_task = asyncio.create_task(loop.run_forever())

    logger.info("Starting polling...")

    try:
        await dp.start_polling(bot)
    finally:
        loop.stop()
        loop_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await loop_task
        await bot.session.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
