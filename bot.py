"""
Sunset bot — Telegram-бот, который напоминает чату о закате.

Вся инициализация в sunset_bot.app; здесь только точка запуска для
`python bot.py` (её использует run_all.py).
"""

import asyncio

from sunset_bot.app import run


if __name__ == "__main__":
    asyncio.run(run())
