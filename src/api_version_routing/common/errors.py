"""
Единые ошибки и коды ошибок.

Назначение:
- предсказуемые коды для HTTP-ответов и логов
- единый стиль исключений по проекту
"""

from __future__ import annotations

from dataclasses import dataclass


class ErrCode:
    # Общие
    UNKNOWN = "unknown"
    VALIDATION = "validation"
    CONFLICT = "conflict"

    # Версии API
    VERSION_NOT_REGISTERED = "version_not_registered"
    VERSION_UNRESOLVABLE = "version_unresolvable"
    VERSION_NOT_SUPPORTED = "version_not_supported"


@dataclass
class AppError(Exception):
    """
    Базовая ошибка приложения.
    - code: стабильный код ошибки
    - message: безопасное сообщение
    - details: доп. данные
    """

    code: str
    message: str
    details: dict | None = None

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code}: {self.message}"


class ValidationError(AppError):
    def __init__(self, message: str = "Ошибка валидации", details: dict | None = None) -> None:
        super().__init__(ErrCode.VALIDATION, message, details)


class ConflictError(AppError):
    def __init__(self, message: str = "Конфликт", details: dict | None = None) -> None:
        super().__init__(ErrCode.CONFLICT, message, details)


class NotRegisteredError(AppError):
    """
    Реестр версий пуст: ошибка конфигурации, внутри не восстанавливается.
    """

    def __init__(
        self, message: str = "No versions registered", details: dict | None = None
    ) -> None:
        super().__init__(ErrCode.VERSION_NOT_REGISTERED, message, details)


class UnresolvableVersionError(AppError):
    def __init__(
        self, message: str = "Версия API не определена", details: dict | None = None
    ) -> None:
        super().__init__(ErrCode.VERSION_UNRESOLVABLE, message, details)
