"""
Ошибки напоминаний о закате.

Handlers и API превращают их в текст для пользователя; внутри сервисов
они просто пробрасываются.
"""


class SunsetError(Exception):
    """Базовая ошибка бота заката."""


class PlaceResolutionFailed(SunsetError):
    """Адрес не удалось превратить в координаты."""


class AddressNotFound(PlaceResolutionFailed):
    """Геокодер ничего не нашёл по адресу."""

    def __init__(self, address: str) -> None:
        super().__init__(f"Address not found: {address}")
        self.address = address


class ResolverUnavailable(PlaceResolutionFailed):
    """Геокодер недоступен (сеть, таймаут, HTTP-ошибка)."""


class CalculationUnavailable(SunsetError):
    """Время заката для места и даты вычислить нельзя."""


class StorageUnavailable(SunsetError):
    """Хранилище напоминаний не загружено или запись в БД не удалась."""
