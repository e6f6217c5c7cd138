"""
Инициализация доступа к БД для бота и API.

ARCH: только фабрики (get_database_provider, get_reminders_repo). Никакой
бизнес-логики и SQL.
"""

from pathlib import Path
from typing import Optional

from storage.database import AiosqliteDatabaseProvider, DatabaseProvider
from sunset_bot.repositories.reminders import SqliteReminderRepository

DEFAULT_DATABASE = Path("data/sunset.db")

_provider: Optional[DatabaseProvider] = None


def get_database_provider(db_path: str | Path | None = None) -> DatabaseProvider:
    """Единый провайдер соединений с БД (создаётся при первом обращении)."""
    global _provider
    if _provider is None:
        _provider = AiosqliteDatabaseProvider(db_path or DEFAULT_DATABASE)
    return _provider


def get_reminders_repo(db_path: str | Path | None = None) -> SqliteReminderRepository:
    """Возвращает репозиторий подписок на закат."""
    return SqliteReminderRepository(get_database_provider(db_path))
