"""
Инициализация Telegram-бота заката.

Тонкий слой: создание Bot/Dispatcher, DI (репозиторий, сервисы, scheduler),
регистрация хендлеров и точка запуска run().
"""

import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from config import (
    BOT_TOKEN,
    DATABASE_PATH,
    GEOCODER_TIMEOUT,
    GEOCODER_URL,
    GEOCODER_USER_AGENT,
    SUNSET_CHECKPOINT_HOUR,
    SUNSET_CHECKPOINT_MINUTE,
    SUNSET_DEFAULT_ADDRESS,
    SUNSET_MINUTES_BEFORE,
    SUNSET_TIMEZONE,
)
from services import (
    create_place_resolver,
    create_reminder_engine,
    create_scheduler_service,
    create_sunset_calculator,
)
from storage import get_reminders_repo
from sunset_bot import messages
from sunset_bot.handlers.start import register_start_handler
from sunset_bot.handlers.sunset import register_sunset_handlers


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

bot = Bot(
    token=BOT_TOKEN,
    default=DefaultBotProperties(parse_mode=ParseMode.HTML),
)
dp = Dispatcher()


async def notify_room(room: str, formatted_sunset: str) -> None:
    """Отправляет напоминание о закате в чат (fire-and-forget)."""
    await bot.send_message(int(room), messages.sunset_reminder(formatted_sunset))


engine = create_reminder_engine(
    reminders=get_reminders_repo(DATABASE_PATH),
    scheduler=create_scheduler_service(SUNSET_TIMEZONE),
    resolver=create_place_resolver(
        GEOCODER_URL,
        user_agent=GEOCODER_USER_AGENT,
        timeout_seconds=GEOCODER_TIMEOUT,
    ),
    calculator=create_sunset_calculator(SUNSET_TIMEZONE),
    notify=notify_room,
    timezone=SUNSET_TIMEZONE,
    minutes_before=SUNSET_MINUTES_BEFORE,
    checkpoint_hour=SUNSET_CHECKPOINT_HOUR,
    checkpoint_minute=SUNSET_CHECKPOINT_MINUTE,
)

# Регистрация хендлеров
register_start_handler(dp, SUNSET_DEFAULT_ADDRESS)
register_sunset_handlers(dp, engine, SUNSET_DEFAULT_ADDRESS)


@dp.startup()
async def on_startup() -> None:
    """Хранилище доступно: восстанавливаем сегодняшние напоминания и запускаем scheduler."""
    if not SUNSET_DEFAULT_ADDRESS:
        logger.warning("SUNSET_DEFAULT_ADDRESS не установлен: команды без адреса работать не будут")
    await engine.on_storage_ready()
    engine.start()


@dp.shutdown()
async def on_shutdown() -> None:
    engine.shutdown()


async def run() -> None:
    """Точка запуска бота."""
    logger.info("Запуск бота заката...")
    await dp.start_polling(bot)


if __name__ == "__main__":
    asyncio.run(run())
