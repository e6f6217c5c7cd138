"""
Общие фикстуры тестов бота заката.

Планировщик, геокодер и калькулятор заката подменяются фейками;
хранилище — настоящий SQLite во временном каталоге.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Sequence, Tuple
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo

import aiosqlite
import pytest

from services.reminders_service import create_reminder_engine
from storage.database import AiosqliteDatabaseProvider
from sunset_bot.errors import AddressNotFound
from sunset_bot.models import Place
from sunset_bot.repositories.reminders import SqliteReminderRepository


TZ_NAME = "America/Los_Angeles"
LA = ZoneInfo(TZ_NAME)
TODAY = date(2026, 10, 17)
NOW = datetime(2026, 10, 17, 9, 0, tzinfo=LA)
SUNSET = datetime(2026, 10, 17, 18, 2, tzinfo=LA)

GLENDON = "1100 Glendon Ave, Los Angeles, CA 90024"
GLENDON_PLACE = Place(34.0614, -118.4446, "1100 Glendon Avenue, Westwood, Los Angeles")
PARIS_PLACE = Place(48.8566, 2.3522, "Paris, France", "Europe/Paris")


class FakeSchedulerService:
    """Запоминает задачи вместо APScheduler; fire() запускает задачу вручную."""

    def __init__(self) -> None:
        self.started = False
        self.daily_jobs: Dict[str, Tuple[Callable[[], Any], int, int]] = {}
        self.reminders: Dict[str, Tuple[Callable[..., Any], datetime, tuple]] = {}
        self.removed: List[str] = []

    def start(self) -> None:
        self.started = True

    def shutdown(self) -> None:
        self.started = False

    def add_daily_job(self, job_id, callback, *, hour, minute=0) -> None:
        self.daily_jobs[job_id] = (callback, hour, minute)

    def add_reminder(self, job_id, callback, *, run_date, args: Sequence[Any] = ()) -> None:
        self.reminders[job_id] = (callback, run_date, tuple(args))

    def remove_reminder(self, job_id: str) -> bool:
        self.removed.append(job_id)
        return self.reminders.pop(job_id, None) is not None

    async def fire(self, job_id: str) -> None:
        callback, _, args = self.reminders.pop(job_id)
        await callback(*args)


class FakePlaceResolver:
    """Адрес → Place по словарю; неизвестный адрес → AddressNotFound."""

    def __init__(self, places: Dict[str, Place] | None = None) -> None:
        self.places = dict(places or {})
        self.calls: List[str] = []
        self.gate: asyncio.Event | None = None

    async def resolve(self, address: str) -> Place:
        self.calls.append(address)
        if self.gate is not None:
            await self.gate.wait()
        try:
            return self.places[address]
        except KeyError:
            raise AddressNotFound(address) from None


class FakeSunsetCalculator:
    """
    Всегда возвращает один и тот же закат (в поясе места, если он задан).

    gates: адрес места → Event, которого расчёт ждёт перед ответом.
    """

    def __init__(self, sunset: datetime = SUNSET) -> None:
        self.sunset = sunset
        self.calls: List[Tuple[Place, date]] = []
        self.gates: Dict[str, asyncio.Event] = {}
        self.errors: Dict[str, Exception] = {}

    async def sunset_for(self, place: Place, day: date) -> datetime:
        self.calls.append((place, day))
        gate = self.gates.get(place.address)
        if gate is not None:
            await gate.wait()
        error = self.errors.get(place.address)
        if error is not None:
            raise error
        if place.timezone:
            return self.sunset.replace(tzinfo=ZoneInfo(place.timezone))
        return self.sunset


class FlakyProvider:
    """Провайдер SQLite, который по флагу fail отказывает в соединении."""

    def __init__(self, db_path) -> None:
        self._inner = AiosqliteDatabaseProvider(db_path)
        self.fail = False

    @asynccontextmanager
    async def connection(self):
        if self.fail:
            raise aiosqlite.OperationalError("disk I/O error")
        async with self._inner.connection() as conn:
            yield conn


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "data" / "sunset.db"


@pytest.fixture
def provider(db_path):
    return FlakyProvider(db_path)


@pytest.fixture
async def repo(provider):
    repository = SqliteReminderRepository(provider)
    await repository.load()
    return repository


@pytest.fixture
def scheduler():
    return FakeSchedulerService()


@pytest.fixture
def resolver():
    return FakePlaceResolver({GLENDON: GLENDON_PLACE, "Paris": PARIS_PLACE})


@pytest.fixture
def calculator():
    return FakeSunsetCalculator()


@pytest.fixture
def notify():
    return AsyncMock()


@pytest.fixture
def make_engine(scheduler, resolver, calculator, notify):
    """Фабрика ReminderEngine поверх переданного репозитория."""

    def _make(reminders, **kwargs):
        return create_reminder_engine(
            reminders=reminders,
            scheduler=scheduler,
            resolver=resolver,
            calculator=calculator,
            notify=notify,
            timezone=TZ_NAME,
            clock=lambda: NOW,
            **kwargs,
        )

    return _make


@pytest.fixture
def engine(make_engine, repo):
    return make_engine(repo)
