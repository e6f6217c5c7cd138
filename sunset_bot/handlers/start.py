"""Хендлер /start и /help — список команд бота."""

from __future__ import annotations

from html import escape

from aiogram import Dispatcher
from aiogram.filters import Command, CommandStart
from aiogram.types import Message

from sunset_bot import messages


def register_start_handler(dp: Dispatcher, default_address: str | None = None) -> None:
    """Регистрирует /start и /help."""

    @dp.message(CommandStart())
    @dp.message(Command("help"))
    async def cmd_start(message: Message) -> None:
        text = messages.help_text()
        if default_address:
            text += f"\n\nDefault address: <i>{escape(default_address)}</i>"
        else:
            text += "\n\n<i>⚠️ SUNSET_DEFAULT_ADDRESS не настроен</i>"
        await message.answer(text)
