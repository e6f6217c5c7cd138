"""Сервисы бота: scheduler, геокодер, закат, напоминания — фабрики инициализации."""

from services.places_service import create_place_resolver, create_sunset_calculator
from services.reminders_service import create_reminder_engine
from services.scheduler_service import create_scheduler_service

__all__ = [
    "create_place_resolver",
    "create_reminder_engine",
    "create_scheduler_service",
    "create_sunset_calculator",
]
