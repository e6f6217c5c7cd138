"""
Хендлеры команд заката. ARCH: только разбор аргумента, вызов ReminderEngine
и ответ пользователю.

Комната = chat.id в виде строки.
"""
from __future__ import annotations

import logging

from aiogram import Dispatcher
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from sunset_bot import messages
from sunset_bot.errors import CalculationUnavailable, SunsetError
from sunset_bot.models import ReminderStatus
from sunset_bot.services.reminders import ReminderEngine


logger = logging.getLogger(__name__)


def _room(message: Message) -> str:
    return str(message.chat.id)


def _address(command: CommandObject | None, default_address: str | None) -> str | None:
    """Адрес из аргумента команды, иначе адрес по умолчанию (может быть None)."""
    args = (command.args or "").strip() if command else ""
    return args or default_address or None


async def _handle_sunset(message: Message, engine: ReminderEngine, address: str | None) -> None:
    """/sunset [адрес] — разовый ответ со временем заката."""
    if not address:
        await message.answer(messages.missing_default_address())
        return
    try:
        report = await engine.peek_sunset(address)
    except SunsetError as e:
        logger.info("Запрос заката для %r не удался: %s", address, e)
        await message.answer(messages.error_message(e))
        return
    await message.answer(messages.one_time_sunset(report))


async def _handle_remind(message: Message, engine: ReminderEngine, address: str | None) -> None:
    """/remind_sunset [адрес] — подписать чат."""
    room = _room(message)
    if engine.has_reminder(room):
        await message.answer(messages.already_subscribed())
        return
    if not address:
        await message.answer(messages.missing_default_address())
        return

    try:
        status = await engine.subscribe(room, address)
    except CalculationUnavailable:
        await message.answer(messages.reminder_set_not_scheduled())
        return
    except SunsetError as e:
        logger.info("Подписка %s на %r не удалась: %s", room, address, e)
        await message.answer(messages.error_message(e))
        return

    if status is ReminderStatus.ALREADY_SUBSCRIBED:
        await message.answer(messages.already_subscribed())
    else:
        await message.answer(messages.reminder_set(engine.get_reminder(room)))


async def _handle_stop(message: Message, engine: ReminderEngine) -> None:
    """/stop_sunset — отписать чат."""
    try:
        status = await engine.unsubscribe(_room(message))
    except SunsetError as e:
        logger.warning("Отписка %s не удалась: %s", _room(message), e)
        await message.answer(messages.error_message(e))
        return

    if status is ReminderStatus.NOT_SUBSCRIBED:
        await message.answer(messages.nothing_to_clear())
    else:
        await message.answer(messages.reminder_cleared())


async def _handle_status(message: Message, engine: ReminderEngine) -> None:
    room = _room(message)
    await message.answer(
        messages.reminder_status(engine.get_reminder(room), engine.get_today_job(room))
    )


def register_sunset_handlers(
    dp: Dispatcher,
    engine: ReminderEngine,
    default_address: str | None = None,
) -> None:
    """Регистрирует команды заката. Регистрировать ДО хендлеров произвольного текста."""

    @dp.message(Command("sunset"))
    async def cmd_sunset(message: Message, command: CommandObject) -> None:
        await _handle_sunset(message, engine, _address(command, default_address))

    @dp.message(Command("remind_sunset"))
    async def cmd_remind_sunset(message: Message, command: CommandObject) -> None:
        await _handle_remind(message, engine, _address(command, default_address))

    @dp.message(Command("stop_sunset"))
    async def cmd_stop_sunset(message: Message) -> None:
        await _handle_stop(message, engine)

    @dp.message(Command("sunset_status"))
    async def cmd_sunset_status(message: Message) -> None:
        await _handle_status(message, engine)
