"""
Выбор маршрута по версии API.

Чистые функции, которые вызывает роутер для кандидатов одного path+method:
- фильтр по VersionCondition.matches
- сортировка совпавших по VersionCondition.rank
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any

from api_version_routing.domain.condition import VersionCondition
from api_version_routing.domain.registry import VersionRegistry


@dataclass(frozen=True)
class VersionedCandidate:
    condition: VersionCondition
    target: Any
    name: str = ""


def _by_rank(a: VersionedCandidate, b: VersionedCandidate) -> int:
    return a.condition.rank(b.condition)


def matching_candidates(
    candidates: Iterable[VersionedCandidate],
    token: str | None,
    registry: VersionRegistry,
) -> list[VersionedCandidate]:
    matched = [c for c in candidates if c.condition.matches(token, registry)]
    # sorted() стабилен: при равном rank сохраняется порядок объявления
    return sorted(matched, key=cmp_to_key(_by_rank))


def select_candidate(
    candidates: Iterable[VersionedCandidate],
    token: str | None,
    registry: VersionRegistry,
) -> VersionedCandidate | None:
    matched = matching_candidates(candidates, token, registry)
    return matched[0] if matched else None


def find_rank_conflicts(
    candidates: Sequence[VersionedCandidate],
) -> list[tuple[VersionedCandidate, VersionedCandidate]]:
    """
    Пары кандидатов с одинаковой latest_version: между ними rank не различает,
    такое объявление неоднозначно. Пустые условия не совпадают ни с чем и не учитываются.
    """
    conflicts: list[tuple[VersionedCandidate, VersionedCandidate]] = []
    for i, left in enumerate(candidates):
        if not left.condition:
            continue
        for right in candidates[i + 1 :]:
            if not right.condition:
                continue
            if left.condition.rank(right.condition) == 0:
                conflicts.append((left, right))
    return conflicts
