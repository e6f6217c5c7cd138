"""
Тесты TimerManager.

- время срабатывания = закат - 5 минут
- не больше одной живой задачи на комнату (в т.ч. при гонке двух schedule)
- отмена работает, даже если планировщик уже запустил колбэк
- ошибка расчёта пробрасывается
"""

import asyncio
from datetime import datetime, timedelta

import pytest

from conftest import GLENDON_PLACE, LA, NOW, PARIS_PLACE, SUNSET, TODAY, TZ_NAME
from sunset_bot.errors import CalculationUnavailable
from sunset_bot.models import Place
from sunset_bot.services.timers import TimerManager


@pytest.fixture
def subscribed():
    return {"room1", "room2"}


@pytest.fixture
def timers(scheduler, calculator, notify, subscribed):
    return TimerManager(
        scheduler,
        calculator,
        notify,
        default_timezone=TZ_NAME,
        should_arm=lambda room: room in subscribed,
        clock=lambda: NOW,
    )


class TestSchedule:

    async def test_fire_time_is_five_minutes_before_sunset(self, timers, scheduler):
        job = await timers.schedule("room1", GLENDON_PLACE)

        assert job.fire_at == datetime(2026, 10, 17, 17, 57, tzinfo=LA)
        assert job.formatted_sunset == "18:02"
        assert timers.get_job("room1") is job
        _, run_date, args = scheduler.reminders[job.job_id]
        assert run_date == job.fire_at
        assert args == ("room1", job.job_id)

    async def test_custom_offset(self, scheduler, calculator, notify):
        timers = TimerManager(scheduler, calculator, notify, minutes_before=15, clock=lambda: NOW)

        job = await timers.schedule("room1", GLENDON_PLACE)

        assert job.fire_at == SUNSET - timedelta(minutes=15)

    async def test_uses_today_in_place_timezone(self, timers, calculator):
        await timers.schedule("room1", GLENDON_PLACE)

        assert calculator.calls == [(GLENDON_PLACE, TODAY)]

    async def test_place_timezone_decides_date(self, scheduler, calculator, notify):
        # 20:00 в Лос-Анджелесе — в Париже уже следующий день.
        late = datetime(2026, 10, 17, 20, 0, tzinfo=LA)
        timers = TimerManager(scheduler, calculator, notify, default_timezone=TZ_NAME, clock=lambda: late)

        await timers.schedule("room1", PARIS_PLACE)

        assert calculator.calls[0][1] == TODAY + timedelta(days=1)

    async def test_past_fire_time_still_arms(self, scheduler, calculator, notify):
        evening = datetime(2026, 10, 17, 23, 0, tzinfo=LA)
        timers = TimerManager(scheduler, calculator, notify, default_timezone=TZ_NAME, clock=lambda: evening)

        job = await timers.schedule("room1", GLENDON_PLACE)

        assert job is not None
        assert job.fire_at < evening
        assert job.job_id in scheduler.reminders

    async def test_reschedule_replaces_job(self, timers, scheduler):
        first = await timers.schedule("room1", GLENDON_PLACE)
        second = await timers.schedule("room1", GLENDON_PLACE)

        assert first.job_id != second.job_id
        assert list(scheduler.reminders) == [second.job_id]
        assert first.job_id in scheduler.removed
        assert timers.jobs() == [second]

    async def test_concurrent_schedule_keeps_one_job(self, timers, scheduler, calculator):
        gate = asyncio.Event()
        calculator.gates[GLENDON_PLACE.address] = gate

        first = asyncio.create_task(timers.schedule("room1", GLENDON_PLACE))
        await asyncio.sleep(0)
        calculator.gates.clear()
        second = await timers.schedule("room1", GLENDON_PLACE)
        gate.set()
        stale = await first

        assert stale is None
        assert timers.jobs() == [second]
        assert list(scheduler.reminders) == [second.job_id]

    async def test_not_armed_when_room_unsubscribed(self, timers, scheduler, subscribed):
        subscribed.discard("room1")

        job = await timers.schedule("room1", GLENDON_PLACE)

        assert job is None
        assert scheduler.reminders == {}

    async def test_calculation_failure_propagates(self, timers, calculator, scheduler):
        calculator.errors[GLENDON_PLACE.address] = CalculationUnavailable("polar night")

        with pytest.raises(CalculationUnavailable):
            await timers.schedule("room1", GLENDON_PLACE)

        assert timers.get_job("room1") is None
        assert scheduler.reminders == {}


class TestCancel:

    async def test_cancel_today(self, timers, scheduler):
        job = await timers.schedule("room1", GLENDON_PLACE)

        assert await timers.cancel_today("room1") is True

        assert timers.get_job("room1") is None
        assert job.job_id not in scheduler.reminders

    async def test_cancel_without_job(self, timers):
        assert await timers.cancel_today("room1") is False

    async def test_cancel_during_calculation_prevents_arming(self, timers, scheduler, calculator):
        gate = asyncio.Event()
        calculator.gates[GLENDON_PLACE.address] = gate

        task = asyncio.create_task(timers.schedule("room1", GLENDON_PLACE))
        await asyncio.sleep(0)
        await timers.cancel_today("room1")
        gate.set()

        assert await task is None
        assert scheduler.reminders == {}

    async def test_clear_all_today(self, timers, scheduler):
        await timers.schedule("room1", GLENDON_PLACE)
        await timers.schedule("room2", PARIS_PLACE)

        cleared = await timers.clear_all_today()

        assert cleared == 2
        assert timers.jobs() == []
        assert scheduler.reminders == {}


class TestForget:

    async def test_forget_drops_generation_of_idle_room(self, timers):
        await timers.schedule("room1", GLENDON_PLACE)
        await timers.cancel_today("room1")

        timers.forget("room1")

        assert "room1" not in timers._generations

    async def test_forget_keeps_room_with_live_job(self, timers):
        await timers.schedule("room1", GLENDON_PLACE)

        timers.forget("room1")

        assert "room1" in timers._generations

    async def test_in_flight_schedule_stays_stale_after_forget(self, timers, scheduler, calculator):
        gate = asyncio.Event()
        calculator.gates[GLENDON_PLACE.address] = gate

        task = asyncio.create_task(timers.schedule("room1", GLENDON_PLACE))
        await asyncio.sleep(0)
        await timers.cancel_today("room1")
        timers.forget("room1")
        calculator.gates.clear()
        await timers.schedule("room1", GLENDON_PLACE)
        gate.set()

        assert await task is None
        assert len(timers.jobs()) == 1

    async def test_unsubscribed_room_leaves_no_generation(self, timers, subscribed):
        subscribed.discard("room1")

        await timers.schedule("room1", GLENDON_PLACE)

        assert "room1" not in timers._generations


class TestFire:

    async def test_fire_notifies_and_discards(self, timers, scheduler, notify):
        job = await timers.schedule("room1", GLENDON_PLACE)

        await scheduler.fire(job.job_id)

        notify.assert_awaited_once_with("room1", "18:02")
        assert timers.get_job("room1") is None

    async def test_no_fire_after_cancel(self, timers, scheduler, notify):
        job = await timers.schedule("room1", GLENDON_PLACE)
        callback, _, args = scheduler.reminders[job.job_id]

        # Планировщик уже достал задачу, но колбэк ещё не выполнился.
        await timers.cancel_today("room1")
        await callback(*args)

        notify.assert_not_awaited()

    async def test_stale_job_does_not_fire(self, timers, scheduler, notify):
        first = await timers.schedule("room1", GLENDON_PLACE)
        callback, _, args = scheduler.reminders[first.job_id]
        second = await timers.schedule("room1", GLENDON_PLACE)

        await callback(*args)

        notify.assert_not_awaited()
        assert timers.get_job("room1") is second

    async def test_notify_error_is_logged(self, timers, scheduler, notify, caplog):
        notify.side_effect = RuntimeError("chat not found")
        job = await timers.schedule("room1", GLENDON_PLACE)

        await scheduler.fire(job.job_id)

        assert "chat not found" in caplog.text
        assert timers.get_job("room1") is None

    async def test_fire_skipped_for_unsubscribed_room(self, timers, scheduler, notify, subscribed):
        job = await timers.schedule("room1", GLENDON_PLACE)
        subscribed.discard("room1")

        await scheduler.fire(job.job_id)

        notify.assert_not_awaited()


def test_default_lock_created():
    timers = TimerManager(None, None, None)

    assert isinstance(timers.lock, asyncio.Lock)
    assert timers.jobs() == []


def test_place_is_hashable():
    assert len({GLENDON_PLACE, Place(**GLENDON_PLACE.to_dict())}) == 1
