"""
Реестр версий API.

Назначение:
- упорядоченный список известных версий (порядок регистрации, без пересортировки)
- версия по умолчанию
- разрешение произвольной строки в ближайшую раннюю зарегистрированную версию

Предусловие: реестр заполняется на старте сервиса, до приёма запросов.
Блокировок нет, после старта реестр только читается.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from api_version_routing.common.errors import NotRegisteredError
from api_version_routing.common.logging import get_project_logger

from .version import Version

log = get_project_logger()


class VersionRegistry:
    def __init__(self) -> None:
        self._versions: list[Version] = []
        self._default: Version | None = None

    @classmethod
    def from_entries(cls, entries: Iterable[tuple[Version | str, bool]]) -> VersionRegistry:
        """
        Реестр из статической конфигурации: пары (версия, is_default).
        """
        registry = cls()
        for version, is_default in entries:
            if not isinstance(version, Version):
                version = Version.parse(version)
            registry.register(version, make_default=is_default)
        return registry

    # -------------------------------------------------------------------------
    # Регистрация
    # -------------------------------------------------------------------------
    def register(self, version: Version, make_default: bool = False) -> None:
        """
        Добавляет версию в конец списка.
        Первая зарегистрированная версия всегда становится default,
        make_default=True перезаписывает default.
        """
        self._versions.append(version)
        if make_default or self._default is None:
            self._default = version
        log.debug(
            "api_version_registered",
            extra={
                "payload": {
                    "version": version.value,
                    "is_default": self._default is version,
                    "total": len(self._versions),
                }
            },
        )

    def clear(self) -> None:
        self._versions.clear()
        self._default = None
        log.debug("api_version_registry_cleared")

    # -------------------------------------------------------------------------
    # Чтение
    # -------------------------------------------------------------------------
    def first_version(self) -> Version:
        if not self._versions:
            raise NotRegisteredError()
        return self._versions[0]

    def all_versions(self) -> tuple[Version, ...]:
        return tuple(self._versions)

    def default_version(self) -> Version | None:
        return self._default

    def resolve(self, text: str | None) -> Version | None:
        """
        Разрешает строку в версию:
        - не дата -> default (или None)
        - пустой реестр -> default, т.е. None
        - иначе последняя версия не позже даты; если дата раньше всех -> первая версия
        """
        try:
            requested = Version.parse(text or "")
        except ValueError:
            log.debug(
                "api_version_unparsable",
                extra={"payload": {"value": (text or "")[:64]}},
            )
            return self._default

        if not self._versions:
            return self._default

        result = self._versions[0]
        for current in self._versions:
            if current.date > requested.date:
                break
            result = current
        return result

    def __len__(self) -> int:
        return len(self._versions)

    def __iter__(self) -> Iterator[Version]:
        return iter(tuple(self._versions))

    def __contains__(self, version: object) -> bool:
        return version in self._versions

    def __repr__(self) -> str:
        default = self._default.value if self._default else None
        return f"VersionRegistry(versions={[v.value for v in self._versions]}, default={default})"
