"""Хранилище и инициализация доступа к БД бота."""

from storage.bootstrap import DEFAULT_DATABASE, get_database_provider, get_reminders_repo

__all__ = ["DEFAULT_DATABASE", "get_database_provider", "get_reminders_repo"]
