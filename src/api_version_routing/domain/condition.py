"""
Условие маршрута по версии API.

Условие - неизменяемое множество версий, с которых маршрут действует.
Операции:
- combine: объединение условий двух уровней объявления (роутер + маршрут)
- matches: подходит ли запрос с данным Api-Version
- rank: порядок среди совпавших условий (более поздняя версия - первой)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from api_version_routing.common.logging import get_project_logger

from .registry import VersionRegistry
from .version import Version

log = get_project_logger()


def effective_version(token: str | None, registry: VersionRegistry) -> Version | None:
    """
    Версия, по которой сравниваем запрос:
    - токен есть -> registry.resolve(token)
    - токена нет (или пустой) -> версия по умолчанию
    """
    if token:
        return registry.resolve(token)
    return registry.default_version()


@dataclass(frozen=True)
class VersionCondition:
    versions: frozenset[Version]

    @classmethod
    def of(cls, *versions: Version) -> VersionCondition:
        return cls(frozenset(versions))

    @classmethod
    def from_version_strings(
        cls, strings: str | Iterable[str], registry: VersionRegistry
    ) -> VersionCondition:
        if isinstance(strings, str):
            strings = [strings]

        resolved: set[Version] = set()
        for raw in strings:
            version = registry.resolve(raw)
            if version is None:
                # Пустой реестр: такое условие никогда не совпадёт
                log.warning(
                    "api_version_condition_unresolvable",
                    extra={"payload": {"value": raw}},
                )
                continue
            resolved.add(version)
        return cls(frozenset(resolved))

    def combine(self, other: VersionCondition) -> VersionCondition:
        log.debug(
            "api_version_condition_combine",
            extra={"payload": {"left": str(self), "right": str(other)}},
        )
        return VersionCondition(self.versions | other.versions)

    def matches(self, token: str | None, registry: VersionRegistry) -> bool:
        version = effective_version(token, registry)
        if version is None:
            return False
        if any(version >= current for current in self.versions):
            return True
        log.debug(
            "api_version_no_match",
            extra={"payload": {"requested": version.value, "condition": str(self)}},
        )
        return False

    def latest_version(self) -> Version | None:
        return max(self.versions, default=None)

    def rank(self, other: VersionCondition) -> int:
        """
        <0 если self должен идти раньше other (у self более поздняя версия),
        >0 если позже, 0 при равенстве. Пустые условия - в конце.
        """
        mine = self.latest_version()
        theirs = other.latest_version()
        if mine is None or theirs is None:
            return (mine is None) - (theirs is None)
        return (theirs.date - mine.date).days

    def __len__(self) -> int:
        return len(self.versions)

    def __str__(self) -> str:
        return "[" + " && ".join(v.value for v in sorted(self.versions)) + "]"
