"""Тексты сообщений бота заката (HTML parse mode)."""

from __future__ import annotations

import random
from html import escape

from sunset_bot.errors import (
    AddressNotFound,
    CalculationUnavailable,
    ResolverUnavailable,
    StorageUnavailable,
    SunsetError,
)
from sunset_bot.models import Place, SunsetReport, TodayJob

REMINDER_TEMPLATES = (
    "🌅 Sunset is at <b>{time}</b>. Time to head outside!",
    "🌇 Heads up: the sun sets at <b>{time}</b>. Go take a look.",
    "🌄 Almost sunset (<b>{time}</b>). Don't miss it!",
)


def sunset_reminder(formatted_time: str) -> str:
    """Текст ежедневного напоминания (фраза выбирается случайно)."""
    return random.choice(REMINDER_TEMPLATES).format(time=formatted_time)


def one_time_sunset(report: SunsetReport) -> str:
    return (
        f"🌅 Sunset today is at <b>{report.formatted_time}</b>\n"
        f"<i>{escape(report.place.address)}</i>"
    )


def reminder_set(place: Place | None = None) -> str:
    text = "✅ Got it! I'll remind this chat a few minutes before sunset every day."
    if place is not None:
        text += f"\n<i>{escape(place.address)}</i>"
    return text


def reminder_set_not_scheduled() -> str:
    return (
        "✅ Reminder saved, but I couldn't work out today's sunset time there. "
        "I'll try again tomorrow."
    )


def already_subscribed() -> str:
    return "🙂 This chat already has a sunset reminder. Use /stop_sunset first to change it."


def reminder_cleared() -> str:
    return "👋 OK, no more sunset reminders for this chat."


def nothing_to_clear() -> str:
    return "🤷 This chat doesn't have a sunset reminder."


def reminder_status(place: Place | None, job: TodayJob | None) -> str:
    if place is None:
        return nothing_to_clear()
    text = f"🌅 Sunset reminder for <i>{escape(place.address)}</i>"
    if job is not None:
        text += f"\nToday: <b>{job.fire_at.strftime('%H:%M')}</b> (sunset {job.formatted_sunset})"
    else:
        text += "\nNothing left for today."
    return text


def missing_default_address() -> str:
    return "⚠️ No default address configured. Add one after the command, e.g. <code>/sunset Paris</code>"


def error_message(error: SunsetError) -> str:
    """Ошибка домена → текст для пользователя."""
    if isinstance(error, AddressNotFound):
        return f"❌ I couldn't find “{escape(error.address)}”."
    if isinstance(error, ResolverUnavailable):
        return "❌ The address lookup service isn't answering. Try again a bit later."
    if isinstance(error, CalculationUnavailable):
        return "❌ There's no sunset there today."
    if isinstance(error, StorageUnavailable):
        return "❌ I can't save reminders right now. Try again a bit later."
    return "❌ Something went wrong."


def help_text() -> str:
    return (
        "🌅 <b>Sunset bot</b>\n\n"
        "/sunset [address] — today's sunset time\n"
        "/remind_sunset [address] — remind this chat before sunset every day\n"
        "/stop_sunset — stop the reminders\n"
        "/sunset_status — show this chat's reminder"
    )
