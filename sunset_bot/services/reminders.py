"""
Сервис напоминаний о закате (ReminderEngine).

Единственная точка, через которую handlers подписывают и отписывают
комнаты. Держит общий mutation lock (им же пользуется TimerManager) и
по замку на комнату, чтобы операции одной комнаты шли строго по порядку.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Callable, Dict, Optional

from sunset_bot.errors import CalculationUnavailable
from sunset_bot.models import Place, ReminderStatus, SunsetReport, TodayJob
from sunset_bot.repositories.reminders import ReminderRepository
from sunset_bot.scheduler import SchedulerServiceProtocol
from sunset_bot.services.daily import DailyScheduler
from sunset_bot.services.places import PlaceResolver
from sunset_bot.services.sunset import SunsetCalculator, report_sunset
from sunset_bot.services.timers import TimerManager


logger = logging.getLogger(__name__)


class ReminderEngine:
    """Подписки комнат на закат: хранилище + сегодняшние таймеры + контрольная точка."""

    def __init__(
        self,
        reminders: ReminderRepository,
        timers: TimerManager,
        daily: DailyScheduler,
        resolver: PlaceResolver,
        calculator: SunsetCalculator,
        *,
        scheduler: SchedulerServiceProtocol | None = None,
        default_timezone: str = "UTC",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._reminders = reminders
        self._timers = timers
        self._daily = daily
        self._resolver = resolver
        self._calculator = calculator
        self._scheduler = scheduler
        self._default_timezone = default_timezone
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._room_locks: Dict[str, asyncio.Lock] = {}
        self._room_waiters: Dict[str, int] = {}
        self._recovered = False

    @property
    def _lock(self) -> asyncio.Lock:
        return self._timers.lock

    @asynccontextmanager
    async def _room(self, room: str) -> AsyncIterator[None]:
        """
        Замок комнаты: операции одной комнаты идут в порядке поступления.

        Когда замок никто не ждёт и подписки у комнаты нет, замок и
        поколение таймеров выбрасываются, чтобы словари не росли бесконечно.
        """
        lock = self._room_locks.setdefault(room, asyncio.Lock())
        self._room_waiters[room] = self._room_waiters.get(room, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._room_waiters[room] -= 1
            if not self._room_waiters[room]:
                del self._room_waiters[room]
                if not self._reminders.has(room):
                    del self._room_locks[room]
                    self._timers.forget(room)

    def start(self) -> None:
        """Регистрирует ежедневную контрольную точку и запускает планировщик."""
        self._daily.register()
        if self._scheduler is not None:
            self._scheduler.start()

    def shutdown(self) -> None:
        if self._scheduler is not None:
            self._scheduler.shutdown()

    async def on_storage_ready(self) -> None:
        """
        Хранилище готово: загрузить подписки и взвести задачи на сегодня.

        Сигнал может прийти сколько угодно раз — восстановление выполняется
        один раз.
        """
        async with self._lock:
            if self._recovered:
                return
            await self._reminders.load()
            self._recovered = True
        await self._daily.rederive()

    def has_reminder(self, room: str) -> bool:
        return self._reminders.has(room)

    def get_reminder(self, room: str) -> Optional[Place]:
        return self._reminders.get(room)

    def get_today_job(self, room: str) -> Optional[TodayJob]:
        return self._timers.get_job(room)

    async def subscribe(self, room: str, address: str) -> ReminderStatus:
        """
        Подписать комнату на напоминание о закате по адресу.

        Повторная подписка ничего не меняет (даже с другим адресом).
        Ошибка геокодера пробрасывается — подписка не создаётся.
        Если не удалось посчитать закат на сегодня, подписка уже сохранена,
        а CalculationUnavailable пробрасывается, чтобы handler сообщил об этом.
        """
        async with self._room(room):
            if self._reminders.has(room):
                return ReminderStatus.ALREADY_SUBSCRIBED

            place = await self._resolver.resolve(address)

            async with self._lock:
                await self._reminders.put(room, place)
            logger.info("Комната %s подписана на закат: %s", room, place.address)

            try:
                await self._timers.schedule(room, place)
            except CalculationUnavailable:
                logger.warning("Подписка %s сохранена, но закат на сегодня не посчитан", room)
                raise
            return ReminderStatus.SUBSCRIBED

    async def unsubscribe(self, room: str) -> ReminderStatus:
        """Отписать комнату. Сначала удаляем подписку из БД, потом таймер."""
        async with self._room(room):
            if not self._reminders.has(room):
                return ReminderStatus.NOT_SUBSCRIBED

            async with self._lock:
                await self._reminders.remove(room)
            await self._timers.cancel_today(room)
            logger.info("Комната %s отписана от заката", room)
            return ReminderStatus.UNSUBSCRIBED

    async def peek_sunset(self, address: str) -> SunsetReport:
        """Разовый запрос: когда сегодня закат по адресу. Ошибки пробрасываются."""
        return await report_sunset(
            self._resolver,
            self._calculator,
            address,
            default_timezone=self._default_timezone,
            now=self._clock(),
        )
