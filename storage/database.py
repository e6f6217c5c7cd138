"""
Единая точка доступа к БД: провайдер соединения.

Репозиторий напоминаний не создаёт соединений сам — он получает
DatabaseProvider и открывает connection() внутри методов (load, put, remove).
Замена SQLite на другую БД — новая реализация провайдера и репозитория.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncContextManager, AsyncIterator, Protocol

import aiosqlite


class DatabaseProvider(Protocol):
    """Провайдер соединения с БД."""

    def connection(self) -> AsyncContextManager[Any]:
        """Возвращает асинхронный контекст-менеджер соединения."""
        ...


class AiosqliteDatabaseProvider:
    """
    Провайдер соединений SQLite через aiosqlite.

    Каталог под файл БД создаётся при первом подключении (бот может
    стартовать на чистой машине).
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)

    @property
    def path(self) -> Path:
        return self._db_path

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as conn:
            conn.row_factory = aiosqlite.Row
            yield conn
