from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping


@dataclass(frozen=True)
class Place:
    """
    Место, к которому привязано напоминание.

    Создаётся PlaceResolver'ом, хранится в репозитории напоминаний.
    timezone — IANA-имя; None значит «часовой пояс из конфига».
    """

    latitude: float
    longitude: float
    address: str
    timezone: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Place":
        return cls(
            latitude=float(row["latitude"]),
            longitude=float(row["longitude"]),
            address=row["address"],
            timezone=row["timezone"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "address": self.address,
            "timezone": self.timezone,
        }


@dataclass(frozen=True)
class TodayJob:
    """
    Взведённый на сегодня одноразовый таймер комнаты.

    Живёт только в памяти TimerManager; после рестарта пересоздаётся
    из репозитория.
    """

    room: str
    job_id: str
    generation: int
    sunset: datetime
    fire_at: datetime
    formatted_sunset: str


@dataclass(frozen=True)
class SunsetReport:
    """Разовый ответ на вопрос «когда закат» (без подписки)."""

    place: Place
    sunset: datetime
    formatted_time: str


class ReminderStatus(str, Enum):
    """Информационные сигналы подписки — не ошибки."""

    SUBSCRIBED = "subscribed"
    ALREADY_SUBSCRIBED = "already_subscribed"
    UNSUBSCRIBED = "unsubscribed"
    NOT_SUBSCRIBED = "not_subscribed"


def format_time(moment: datetime) -> str:
    """Время в виде HH:MM (как в напоминаниях и ответах бота)."""
    return moment.strftime("%H:%M")


__all__ = ["Place", "TodayJob", "SunsetReport", "ReminderStatus", "format_time"]
