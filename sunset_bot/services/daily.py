"""Ежедневная контрольная точка: пересчёт всех напоминаний на новый день."""

from __future__ import annotations

import asyncio
import logging

from sunset_bot.repositories.reminders import ReminderRepository
from sunset_bot.scheduler import SchedulerServiceProtocol
from sunset_bot.services.timers import TimerManager


logger = logging.getLogger(__name__)

DAILY_JOB_ID = "sunset_daily_checkpoint"
CHECKPOINT_HOUR = 1
CHECKPOINT_MINUTE = 0


class DailyScheduler:
    """
    Раз в сутки (по умолчанию в 01:00) снимает вчерашние задачи и взводит
    по одной новой на каждую подписку.

    01:00 — позже любого заката и раньше утренней активности в чатах.
    """

    def __init__(
        self,
        scheduler: SchedulerServiceProtocol,
        timers: TimerManager,
        reminders: ReminderRepository,
        *,
        hour: int = CHECKPOINT_HOUR,
        minute: int = CHECKPOINT_MINUTE,
    ) -> None:
        self._scheduler = scheduler
        self._timers = timers
        self._reminders = reminders
        self._hour = hour
        self._minute = minute

    def register(self) -> None:
        """Регистрирует ежедневную задачу в планировщике."""
        self._scheduler.add_daily_job(
            DAILY_JOB_ID,
            self.rederive,
            hour=self._hour,
            minute=self._minute,
        )

    async def rederive(self) -> int:
        """
        Пересчитывает сегодняшние задачи по всем подпискам.

        Ошибки отдельных комнат только логируются — подписка остаётся,
        следующая попытка будет на следующей контрольной точке.
        Возвращает число взведённых задач.
        """
        await self._timers.clear_all_today()
        entries = self._reminders.all()
        if not entries:
            logger.info("Подписок на закат нет, пересчитывать нечего")
            return 0

        results = await asyncio.gather(
            *(self._timers.schedule(room, place) for room, place in entries),
            return_exceptions=True,
        )

        armed = 0
        for (room, place), result in zip(entries, results):
            if isinstance(result, BaseException):
                logger.warning(
                    "Не удалось взвести напоминание для %s (%s): %s",
                    room,
                    place.address,
                    result,
                )
            elif result is not None:
                armed += 1

        logger.info("Пересчёт напоминаний: взведено %s из %s", armed, len(entries))
        return armed
