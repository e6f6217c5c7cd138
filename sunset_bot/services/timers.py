"""
Сегодняшние таймеры напоминаний (TimerManager).

На каждую подписанную комнату — не больше одного живого TodayJob.
Все изменения словаря задач идут под общим mutation lock; расчёт заката
выполняется вне его. Поколение (generation) комнаты растёт при каждом
schedule/cancel — устаревший расчёт, закончившийся позже, задачу не взводит.
Поколения берутся из одного счётчика на все комнаты, поэтому запись
отписанной комнаты можно выбросить (forget) без риска совпадения номеров.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, Optional

from sunset_bot.models import Place, TodayJob, format_time
from sunset_bot.scheduler import SchedulerServiceProtocol
from sunset_bot.services.sunset import SunsetCalculator, resolve_timezone


logger = logging.getLogger(__name__)

MINUTES_BEFORE_SUNSET = 5

NotifyCallback = Callable[[str, str], Awaitable[Any]]


class TimerManager:
    """Создание, замена и отмена одноразовых задач «на сегодня»."""

    def __init__(
        self,
        scheduler: SchedulerServiceProtocol,
        calculator: SunsetCalculator,
        notify: NotifyCallback,
        *,
        lock: asyncio.Lock | None = None,
        default_timezone: str = "UTC",
        minutes_before: int = MINUTES_BEFORE_SUNSET,
        should_arm: Callable[[str], bool] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._calculator = calculator
        self._notify = notify
        self._lock = lock or asyncio.Lock()
        self._default_timezone = default_timezone
        self._offset = timedelta(minutes=minutes_before)
        self._should_arm = should_arm or (lambda room: True)
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._jobs: Dict[str, TodayJob] = {}
        self._generations: Dict[str, int] = {}
        self._counter = itertools.count(1)

    @property
    def lock(self) -> asyncio.Lock:
        return self._lock

    def get_job(self, room: str) -> Optional[TodayJob]:
        return self._jobs.get(room)

    def jobs(self) -> list[TodayJob]:
        return list(self._jobs.values())

    async def schedule(self, room: str, place: Place) -> Optional[TodayJob]:
        """
        Взводит напоминание комнаты на сегодня (заменяя прежнее).

        Возвращает TodayJob или None, если пока считали закат, комнату
        отписали или для неё запустили более новый schedule.
        CalculationUnavailable пробрасывается — логирует вызывающий.
        """
        async with self._lock:
            generation = self._bump_generation(room)
            self._discard(room)

        tz = resolve_timezone(place, self._default_timezone)
        today = self._clock().astimezone(tz).date()
        sunset = await self._calculator.sunset_for(place, today)
        fire_at = sunset - self._offset

        async with self._lock:
            if self._generations.get(room) != generation:
                logger.info("Напоминание для %s устарело до взвода, пропускаем", room)
                return None
            if not self._should_arm(room):
                self._generations.pop(room, None)
                logger.info("Комнату %s отписали, пока считали закат", room)
                return None

            job = TodayJob(
                room=room,
                job_id=f"sunset:{room}:{generation}",
                generation=generation,
                sunset=sunset,
                fire_at=fire_at,
                formatted_sunset=format_time(sunset),
            )
            self._scheduler.add_reminder(
                job.job_id,
                self._fire,
                run_date=fire_at,
                args=(room, job.job_id),
            )
            self._jobs[room] = job

        logger.info(
            "Напоминание для %s на %s (закат %s)",
            room,
            fire_at.isoformat(),
            job.formatted_sunset,
        )
        return job

    async def cancel_today(self, room: str) -> bool:
        """Снимает сегодняшнюю задачу комнаты. True, если задача была."""
        async with self._lock:
            self._bump_generation(room)
            return self._discard(room)

    async def clear_all_today(self) -> int:
        """Снимает все сегодняшние задачи (первый шаг ежедневного пересчёта)."""
        async with self._lock:
            for room in list(self._generations):
                self._bump_generation(room)
            cleared = 0
            for room in list(self._jobs):
                if self._discard(room):
                    cleared += 1
        if cleared:
            logger.info("Снято сегодняшних напоминаний: %s", cleared)
        return cleared

    def forget(self, room: str) -> None:
        """Забыть поколение комнаты без живой задачи (комнату отписали)."""
        if room not in self._jobs:
            self._generations.pop(room, None)

    async def _fire(self, room: str, job_id: str) -> None:
        """Колбэк APScheduler: одноразовое срабатывание задачи."""
        async with self._lock:
            job = self._jobs.get(room)
            # Задачу могли отменить после того, как планировщик её запустил.
            if job is None or job.job_id != job_id or not self._should_arm(room):
                logger.info("Задача %s уже отменена, пропускаем", job_id)
                return
            del self._jobs[room]

        try:
            await self._notify(room, job.formatted_sunset)
            logger.info("Напоминание о закате отправлено %s", room)
        except Exception as e:  # noqa: BLE001
            logger.error("Ошибка отправки напоминания %s: %s", room, e)

    def _bump_generation(self, room: str) -> int:
        generation = next(self._counter)
        self._generations[room] = generation
        return generation

    def _discard(self, room: str) -> bool:
        """Убирает задачу комнаты из живых и из планировщика. Вызывать под lock."""
        job = self._jobs.pop(room, None)
        if job is None:
            return False
        self._scheduler.remove_reminder(job.job_id)
        return True
