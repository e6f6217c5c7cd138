"""
Инициализация геокодера и калькулятора заката.

Создание инстансов вынесено сюда, чтобы app.py и API не знали деталей
конфигурации внешних сервисов.
"""

from sunset_bot.services.places import NominatimPlaceResolver
from sunset_bot.services.sunset import AstralSunsetCalculator


def create_place_resolver(
    base_url: str,
    *,
    user_agent: str,
    timeout_seconds: int = 10,
) -> NominatimPlaceResolver:
    """Создаёт геокодер Nominatim."""
    return NominatimPlaceResolver(base_url, user_agent=user_agent, timeout_seconds=timeout_seconds)


def create_sunset_calculator(timezone: str) -> AstralSunsetCalculator:
    """Создаёт калькулятор заката (astral)."""
    return AstralSunsetCalculator(timezone)
