"""
API бота заката — только чтение.

Подписки хранятся в той же SQLite, что и у бота; таймеры живут в процессе
бота, поэтому здесь их нет. /api/sunset — тот же разовый запрос, что /sunset.
"""

import logging
import os
from datetime import datetime, timezone
from typing import List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from services import create_place_resolver, create_sunset_calculator
from storage.database import AiosqliteDatabaseProvider
from sunset_bot.errors import (
    AddressNotFound,
    CalculationUnavailable,
    PlaceResolutionFailed,
    StorageUnavailable,
)
from sunset_bot.repositories.reminders import SqliteReminderRepository
from sunset_bot.services.sunset import report_sunset

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE = os.getenv("DATABASE_PATH", "data/sunset.db")
SUNSET_TIMEZONE = os.getenv("SUNSET_TIMEZONE", "America/Los_Angeles")
SUNSET_DEFAULT_ADDRESS = os.getenv("SUNSET_DEFAULT_ADDRESS", "").strip()

app = FastAPI(title="Sunset Bot API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)

resolver = create_place_resolver(
    os.getenv("GEOCODER_URL", "https://nominatim.openstreetmap.org"),
    user_agent=os.getenv("GEOCODER_USER_AGENT", "sunset-reminder-bot"),
    timeout_seconds=int(os.getenv("GEOCODER_TIMEOUT", "10")),
)
calculator = create_sunset_calculator(SUNSET_TIMEZONE)


class PlaceOut(BaseModel):
    latitude: float
    longitude: float
    address: str
    timezone: Optional[str] = None


class ReminderOut(BaseModel):
    room: str
    place: PlaceOut


class SunsetOut(BaseModel):
    address: str
    sunset: datetime
    formatted_time: str


def get_repository() -> SqliteReminderRepository:
    """Новый репозиторий на каждый запрос: подписки меняет процесс бота."""
    return SqliteReminderRepository(AiosqliteDatabaseProvider(DATABASE))


@app.get("/api/health")
async def health():
    return {"status": "ok", "timezone": SUNSET_TIMEZONE}


@app.get("/api/reminders", response_model=List[ReminderOut])
async def list_reminders():
    repo = get_repository()
    try:
        await repo.load()
    except StorageUnavailable as e:
        logger.error("Не удалось прочитать подписки: %s", e)
        raise HTTPException(status_code=503, detail="Storage unavailable")
    return [
        ReminderOut(room=room, place=PlaceOut(**place.to_dict()))
        for room, place in sorted(repo.all(), key=lambda item: item[0])
    ]


@app.get("/api/sunset", response_model=SunsetOut)
async def get_sunset(address: Optional[str] = Query(None)):
    address = (address or "").strip() or SUNSET_DEFAULT_ADDRESS
    if not address:
        raise HTTPException(status_code=400, detail="address is required")

    try:
        report = await report_sunset(
            resolver,
            calculator,
            address,
            default_timezone=SUNSET_TIMEZONE,
            now=datetime.now(timezone.utc),
        )
    except AddressNotFound:
        raise HTTPException(status_code=404, detail="Address not found")
    except CalculationUnavailable:
        raise HTTPException(status_code=422, detail="No sunset at this place today")
    except PlaceResolutionFailed:
        raise HTTPException(status_code=503, detail="Geocoder unavailable")

    return SunsetOut(
        address=report.place.address,
        sunset=report.sunset,
        formatted_time=report.formatted_time,
    )
