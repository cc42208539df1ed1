import asyncio

import structlog
from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.memory import MemoryStorage

from bot.handlers import form_router, menu_router, recipe_router, start_router
from bot.middlewares.logging import UpdateLoggingMiddleware
from core.config import settings
from core.logging import configure_logging

logger = structlog.get_logger(__name__)


def build_dispatcher() -> Dispatcher:
    dp = Dispatcher(storage=MemoryStorage())
    dp.update.middleware(UpdateLoggingMiddleware())
    dp.include_router(start_router)
    dp.include_router(menu_router)
    dp.include_router(form_router)
    dp.include_router(recipe_router)
    return dp


async def main() -> None:
    configure_logging(settings.log_level, settings.log_json)
    if not settings.tg_token:
        raise SystemExit("TG_TOKEN is not set")

    logger.info(
        "bot_starting",
        model=settings.gigachat_model,
        options_per_request=settings.recipe_options_count,
    )
    dp = build_dispatcher()
    bot = Bot(token=settings.tg_token)
    try:
        await dp.start_polling(bot)
    finally:
        await bot.session.close()


if __name__ == "__main__":
    asyncio.run(main())
