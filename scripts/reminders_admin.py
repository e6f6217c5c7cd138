#!/usr/bin/env python3
"""
Просмотр и ручное удаление подписок на закат (без бота).

Использование:
  python scripts/reminders_admin.py --list
  python scripts/reminders_admin.py --remove 827628064

Работающий бот держит подписки в памяти: после --remove его нужно
перезапустить, иначе сегодняшнее напоминание всё равно придёт.
"""
import argparse
import os
import sqlite3
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DATABASE = os.getenv("DATABASE_PATH", "data/sunset.db")


def list_reminders() -> None:
    if not Path(DATABASE).exists():
        print("БД не найдена:", DATABASE)
        return
    with sqlite3.connect(DATABASE) as db:
        rows = db.execute(
            "SELECT room, address, latitude, longitude, created_at FROM sunset_reminders ORDER BY room"
        ).fetchall()
    for room, address, lat, lon, created_at in rows:
        print(f"{room}\t{lat:.4f},{lon:.4f}\t{address}\t{created_at}")
    print(f"Всего подписок: {len(rows)}")


def remove_reminder(room: str) -> None:
    with sqlite3.connect(DATABASE) as db:
        cursor = db.execute("DELETE FROM sunset_reminders WHERE room = ?", (str(room),))
        db.commit()
    if cursor.rowcount:
        print(f"✓ подписка {room} удалена")
    else:
        print(f"Подписки {room} нет")


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    group = ap.add_mutually_exclusive_group(required=True)
    group.add_argument("--list", action="store_true", help="Показать все подписки")
    group.add_argument("--remove", metavar="ROOM", help="Удалить подписку чата (chat id)")
    args = ap.parse_args()
    if args.list:
        list_reminders()
    else:
        remove_reminder(args.remove)
