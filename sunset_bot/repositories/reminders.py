"""
Репозиторий подписок на закат. ARCH: весь SQL по напоминаниям — только здесь.

Таблица — источник правды «кто подписан и где». В памяти держим кэш,
который загружается один раз (load) и меняется только после успешной
записи в БД.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Protocol, runtime_checkable

import aiosqlite

from sunset_bot.errors import StorageUnavailable
from sunset_bot.models import Place

if TYPE_CHECKING:
    from storage.database import DatabaseProvider


logger = logging.getLogger(__name__)


@runtime_checkable
class ReminderRepository(Protocol):
    """Интерфейс хранилища напоминаний: комната → место."""

    @property
    def loaded(self) -> bool:
        ...

    async def load(self) -> None:
        ...

    def has(self, room: str) -> bool:
        ...

    def get(self, room: str) -> Place | None:
        ...

    async def put(self, room: str, place: Place) -> None:
        ...

    async def remove(self, room: str) -> None:
        ...

    def all(self) -> list[tuple[str, Place]]:
        ...


class SqliteReminderRepository(ReminderRepository):
    """
    Хранилище напоминаний на базе SQLite.

    has/get/all читают только кэш. put/remove сначала пишут в БД и лишь
    потом трогают кэш: неудачная запись не видна в has/all.
    """

    def __init__(self, db_provider: "DatabaseProvider") -> None:
        self._provider = db_provider
        self._reminders: Dict[str, Place] | None = None

    @property
    def loaded(self) -> bool:
        return self._reminders is not None

    async def _ensure_table(self, db: aiosqlite.Connection) -> None:
        """Создаёт таблицу если её нет (API может стартовать раньше бота)."""
        await db.execute("""
            CREATE TABLE IF NOT EXISTS sunset_reminders (
                room TEXT PRIMARY KEY,
                latitude REAL NOT NULL,
                longitude REAL NOT NULL,
                address TEXT NOT NULL,
                timezone TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        await db.commit()

    async def load(self) -> None:
        """Загружает подписки в кэш. Повторный вызов ничего не делает."""
        if self._reminders is not None:
            return

        try:
            async with self._provider.connection() as db:
                await self._ensure_table(db)
                cursor = await db.execute(
                    "SELECT room, latitude, longitude, address, timezone FROM sunset_reminders"
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageUnavailable(f"Failed to load reminders: {e}") from e

        # Загрузка могла случиться параллельно — кэш не перетираем.
        if self._reminders is None:
            self._reminders = {str(row["room"]): Place.from_row(row) for row in rows}
            logger.info("Загружено напоминаний о закате: %s", len(self._reminders))

    def has(self, room: str) -> bool:
        return self._reminders is not None and room in self._reminders

    def get(self, room: str) -> Place | None:
        if self._reminders is None:
            return None
        return self._reminders.get(room)

    async def put(self, room: str, place: Place) -> None:
        reminders = self._require_loaded()
        try:
            async with self._provider.connection() as db:
                await db.execute(
                    """INSERT OR REPLACE INTO sunset_reminders
                           (room, latitude, longitude, address, timezone, created_at)
                       VALUES (?, ?, ?, ?, ?, CURRENT_TIMESTAMP)""",
                    (room, place.latitude, place.longitude, place.address, place.timezone),
                )
                await db.commit()
        except aiosqlite.Error as e:
            raise StorageUnavailable(f"Failed to save reminder for {room}: {e}") from e
        reminders[room] = place

    async def remove(self, room: str) -> None:
        reminders = self._require_loaded()
        if room not in reminders:
            return
        try:
            async with self._provider.connection() as db:
                await db.execute("DELETE FROM sunset_reminders WHERE room = ?", (room,))
                await db.commit()
        except aiosqlite.Error as e:
            raise StorageUnavailable(f"Failed to delete reminder for {room}: {e}") from e
        reminders.pop(room, None)

    def all(self) -> list[tuple[str, Place]]:
        if self._reminders is None:
            return []
        return list(self._reminders.items())

    def _require_loaded(self) -> Dict[str, Place]:
        if self._reminders is None:
            raise StorageUnavailable("Reminder storage is not loaded yet")
        return self._reminders
