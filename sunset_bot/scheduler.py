"""
Сервис планировщика напоминаний о закате.

Инкапсулирует APScheduler: ежедневный CronTrigger (контрольная точка) и
одноразовые DateTrigger (сегодняшние напоминания комнат). TimerManager и
DailyScheduler работают только с SchedulerService.
"""

# ⚠️ Infrastructure boundary: APScheduler implementation
# Do not import this module outside services layer


from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Protocol, Sequence

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger


logger = logging.getLogger(__name__)


class SchedulerServiceProtocol(Protocol):
    """Интерфейс сервиса планировщика. В тестах подменяется фейком."""

    def start(self) -> None: ...

    def shutdown(self) -> None: ...

    def add_daily_job(
        self,
        job_id: str,
        callback: Callable[[], Any],
        *,
        hour: int,
        minute: int = 0,
    ) -> None: ...

    def add_reminder(
        self,
        job_id: str,
        callback: Callable[..., Any],
        *,
        run_date: datetime,
        args: Sequence[Any] = (),
    ) -> None: ...

    def remove_reminder(self, job_id: str) -> bool: ...


class SchedulerService:
    """
    Сервис планировщика: запуск и управление задачами.

    Ежедневная задача и одноразовые напоминания — два разных вида задач:
    первая перезаписывается по id, вторые создаются с уникальным id и
    удаляются явно.
    """

    def __init__(self, timezone: str) -> None:
        self._timezone = timezone
        self._scheduler = AsyncIOScheduler(timezone=timezone)

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        """Запускает планировщик. Повторный старт пропускается."""
        if self._scheduler.running:
            logger.info("Scheduler уже запущен, повторный старт пропущен")
            return
        logger.info("Запуск scheduler (часовой пояс %s)...", self._timezone)
        self._scheduler.start()

    def shutdown(self) -> None:
        """Останавливает планировщик, не дожидаясь запущенных задач."""
        if not self._scheduler.running:
            return
        self._scheduler.shutdown(wait=False)
        logger.info("Scheduler остановлен")

    def add_daily_job(
        self,
        job_id: str,
        callback: Callable[[], Any],
        *,
        hour: int,
        minute: int = 0,
    ) -> None:
        """
        Ежедневная задача в hour:minute по часовому поясу планировщика.

        misfire_grace_time=None: контрольная точка, пропущенная из-за
        зависшего цикла или сна машины, всё равно выполнится (один раз).
        """
        self._scheduler.add_job(
            callback,
            CronTrigger(hour=hour, minute=minute, timezone=self._timezone),
            id=job_id,
            replace_existing=True,
            coalesce=True,
            misfire_grace_time=None,
        )
        logger.info("Ежедневная задача %s: %02d:%02d", job_id, hour, minute)

    def add_reminder(
        self,
        job_id: str,
        callback: Callable[..., Any],
        *,
        run_date: datetime,
        args: Sequence[Any] = (),
    ) -> None:
        """
        Одноразовое напоминание на run_date.

        misfire_grace_time=None: если время уже прошло, задача сработает
        сразу, а не будет пропущена.
        """
        self._scheduler.add_job(
            callback,
            DateTrigger(run_date=run_date),
            id=job_id,
            args=list(args),
            replace_existing=True,
            misfire_grace_time=None,
        )

    def remove_reminder(self, job_id: str) -> bool:
        """Удалить задачу по id. Возвращает True, если задача была удалена."""
        try:
            self._scheduler.remove_job(job_id)
            return True
        except JobLookupError:
            return False

    def job_ids(self) -> list[str]:
        return [job.id for job in self._scheduler.get_jobs()]
