"""
Расчёт времени заката.

Считаем локально через astral — сетевых запросов нет, но интерфейс
асинхронный, чтобы реализацию можно было заменить внешним API.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Protocol, runtime_checkable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from astral import Observer
from astral.sun import sunset

from sunset_bot.errors import CalculationUnavailable
from sunset_bot.models import Place, SunsetReport, format_time
from sunset_bot.services.places import PlaceResolver


logger = logging.getLogger(__name__)


@runtime_checkable
class SunsetCalculator(Protocol):
    """Интерфейс калькулятора заката."""

    async def sunset_for(self, place: Place, day: date) -> datetime:
        """Момент заката в place на дату day (aware datetime)."""
        ...


def resolve_timezone(place: Place, default_timezone: str) -> ZoneInfo:
    """Часовой пояс места; без него — пояс из конфига."""
    name = place.timezone or default_timezone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Неизвестный часовой пояс %s, используем %s", name, default_timezone)
        return ZoneInfo(default_timezone)


class AstralSunsetCalculator:
    """Закат по координатам через astral.sun.sunset."""

    def __init__(self, default_timezone: str) -> None:
        self._default_timezone = default_timezone

    async def sunset_for(self, place: Place, day: date) -> datetime:
        tz = resolve_timezone(place, self._default_timezone)
        observer = Observer(latitude=place.latitude, longitude=place.longitude)
        try:
            return sunset(observer, date=day, tzinfo=tz)
        except ValueError as e:
            # Полярный день/ночь: солнце в этот день не садится или не встаёт.
            raise CalculationUnavailable(
                f"No sunset at {place.address} on {day.isoformat()}: {e}"
            ) from e


async def report_sunset(
    resolver: PlaceResolver,
    calculator: SunsetCalculator,
    address: str,
    *,
    default_timezone: str,
    now: datetime,
) -> SunsetReport:
    """
    Разовый ответ «когда сегодня закат по адресу» — общий для бота и API.

    «Сегодня» берётся в часовом поясе места. Ошибки геокодера и расчёта
    пробрасываются.
    """
    place = await resolver.resolve(address)
    tz = resolve_timezone(place, default_timezone)
    sunset_at = await calculator.sunset_for(place, now.astimezone(tz).date())
    return SunsetReport(place=place, sunset=sunset_at, formatted_time=format_time(sunset_at))
