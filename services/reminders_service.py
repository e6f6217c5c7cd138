"""
Сборка ReminderEngine: хранилище, таймеры, ежедневная контрольная точка.

Здесь единственное место, где компоненты связываются друг с другом;
handlers получают готовый engine.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Callable

from sunset_bot.repositories.reminders import ReminderRepository
from sunset_bot.scheduler import SchedulerServiceProtocol
from sunset_bot.services.daily import CHECKPOINT_HOUR, CHECKPOINT_MINUTE, DailyScheduler
from sunset_bot.services.places import PlaceResolver
from sunset_bot.services.reminders import ReminderEngine
from sunset_bot.services.sunset import SunsetCalculator
from sunset_bot.services.timers import MINUTES_BEFORE_SUNSET, NotifyCallback, TimerManager


def create_reminder_engine(
    *,
    reminders: ReminderRepository,
    scheduler: SchedulerServiceProtocol,
    resolver: PlaceResolver,
    calculator: SunsetCalculator,
    notify: NotifyCallback,
    timezone: str,
    minutes_before: int = MINUTES_BEFORE_SUNSET,
    checkpoint_hour: int = CHECKPOINT_HOUR,
    checkpoint_minute: int = CHECKPOINT_MINUTE,
    clock: Callable[[], datetime] | None = None,
) -> ReminderEngine:
    """Создаёт ReminderEngine с общим mutation lock для хранилища и таймеров."""
    timers = TimerManager(
        scheduler,
        calculator,
        notify,
        lock=asyncio.Lock(),
        default_timezone=timezone,
        minutes_before=minutes_before,
        should_arm=reminders.has,
        clock=clock,
    )
    daily = DailyScheduler(
        scheduler,
        timers,
        reminders,
        hour=checkpoint_hour,
        minute=checkpoint_minute,
    )
    return ReminderEngine(
        reminders,
        timers,
        daily,
        resolver,
        calculator,
        scheduler=scheduler,
        default_timezone=timezone,
        clock=clock,
    )
