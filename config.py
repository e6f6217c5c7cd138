"""Конфигурация бота заката."""

import os
from dotenv import load_dotenv

load_dotenv()

BOT_TOKEN = os.getenv("BOT_TOKEN")
if not BOT_TOKEN:
    raise ValueError("BOT_TOKEN не установлен в .env")

# Адрес для команд без аргумента. Без него работают только команды с явным адресом
SUNSET_DEFAULT_ADDRESS = os.getenv("SUNSET_DEFAULT_ADDRESS", "").strip()

# Часовой пояс планировщика и мест без своего пояса
SUNSET_TIMEZONE = os.getenv("SUNSET_TIMEZONE", "America/Los_Angeles")

# За сколько минут до заката напоминать
SUNSET_MINUTES_BEFORE = int(os.getenv("SUNSET_MINUTES_BEFORE", "5"))

# Ежедневный пересчёт напоминаний (после любого заката, до утра)
SUNSET_CHECKPOINT_HOUR = int(os.getenv("SUNSET_CHECKPOINT_HOUR", "1"))
SUNSET_CHECKPOINT_MINUTE = int(os.getenv("SUNSET_CHECKPOINT_MINUTE", "0"))

DATABASE_PATH = os.getenv("DATABASE_PATH", "data/sunset.db")

# Геокодер (Nominatim)
GEOCODER_URL = os.getenv("GEOCODER_URL", "https://nominatim.openstreetmap.org")
GEOCODER_USER_AGENT = os.getenv("GEOCODER_USER_AGENT", "sunset-reminder-bot")
GEOCODER_TIMEOUT = int(os.getenv("GEOCODER_TIMEOUT", "10"))
