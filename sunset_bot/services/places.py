from __future__ import annotations

import asyncio
import logging
from typing import Protocol, runtime_checkable

import aiohttp

from sunset_bot.errors import AddressNotFound, ResolverUnavailable
from sunset_bot.models import Place


logger = logging.getLogger(__name__)

DEFAULT_GEOCODER_URL = "https://nominatim.openstreetmap.org"


@runtime_checkable
class PlaceResolver(Protocol):
    """Интерфейс геокодера: строка адреса → Place."""

    async def resolve(self, address: str) -> Place:
        """Найти место по адресу. AddressNotFound / ResolverUnavailable при неудаче."""
        ...


class NominatimPlaceResolver:
    """
    Реализация PlaceResolver через Nominatim (OpenStreetMap) /search.

    Nominatim требует осмысленный User-Agent; часовой пояс не отдаёт,
    поэтому Place.timezone остаётся пустым (берётся из конфига).
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        user_agent: str = "sunset-reminder-bot",
        timeout_seconds: int = 10,
    ) -> None:
        self._base_url = (base_url or DEFAULT_GEOCODER_URL).rstrip("/")
        self._user_agent = user_agent
        self._timeout = timeout_seconds

    async def resolve(self, address: str) -> Place:
        address = (address or "").strip()
        if not address:
            raise AddressNotFound(address)

        results = await self._search(address)
        if not results:
            raise AddressNotFound(address)

        first = results[0]
        try:
            return Place(
                latitude=float(first["lat"]),
                longitude=float(first["lon"]),
                address=first.get("display_name") or address,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ResolverUnavailable(f"Unexpected geocoder response for {address!r}") from e

    async def _search(self, address: str) -> list[dict]:
        """Запрос в /search, возвращает список результатов (может быть пустым)."""
        url = f"{self._base_url}/search"
        params = {"q": address, "format": "jsonv2", "limit": "1"}
        headers = {"User-Agent": self._user_agent}

        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as session:
                async with session.get(url, params=params, headers=headers) as resp:
                    if resp.status >= 400:
                        body = await resp.text()
                        raise ResolverUnavailable(f"HTTP {resp.status}: {body[:200]}")
                    data = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Geocoder request failed for %r: %s", address, e)
            raise ResolverUnavailable(f"Geocoder request failed: {e}") from e

        if not isinstance(data, list):
            raise ResolverUnavailable("Unexpected geocoder response")
        return data
