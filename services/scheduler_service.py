"""
Сервис планировщика напоминаний.

app.py получает готовый SchedulerService и не знает про APScheduler.

This module acts as an isolation layer for scheduler implementation
(anti-corruption: app depends on services.*, not directly on sunset_bot.scheduler).
"""

from sunset_bot.scheduler import SchedulerService


def create_scheduler_service(timezone: str) -> SchedulerService:
    """Создаёт SchedulerService в часовом поясе из конфига."""
    return SchedulerService(timezone)
