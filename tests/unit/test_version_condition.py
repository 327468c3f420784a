from __future__ import annotations

import logging
from functools import cmp_to_key

import pytest

from api_version_routing.domain.condition import VersionCondition, effective_version
from api_version_routing.domain.registry import VersionRegistry
from api_version_routing.domain.version import Version

V1 = Version.of(2023, 1, 1)
V2 = Version.of(2024, 1, 1)


@pytest.fixture()
def registry() -> VersionRegistry:
    r = VersionRegistry()
    r.register(V1, make_default=False)
    r.register(V2, make_default=True)
    return r


def test_from_version_strings_resolves_through_registry(registry: VersionRegistry) -> None:
    cond = VersionCondition.from_version_strings(["2023-01-01", "2023-06-01", "2024-02-01"], registry)
    assert cond.versions == frozenset({V1, V2})


def test_from_single_string(registry: VersionRegistry) -> None:
    cond = VersionCondition.from_version_strings("2023-01-01", registry)
    assert cond.versions == frozenset({V1})


def test_condition_is_independent_of_later_registry_changes(registry: VersionRegistry) -> None:
    cond = VersionCondition.from_version_strings("2024-05-01", registry)
    registry.register(Version.of(2024, 5, 1))
    assert cond.versions == frozenset({V2})


def test_from_strings_on_empty_registry_drops_versions(caplog) -> None:
    caplog.set_level(logging.WARNING, logger="api-version-routing")
    cond = VersionCondition.from_version_strings("2023-01-01", VersionRegistry())
    assert cond.versions == frozenset()
    assert cond.latest_version() is None
    assert any(r.msg == "api_version_condition_unresolvable" for r in caplog.records)


def test_combine_is_union(registry: VersionRegistry) -> None:
    c1 = VersionCondition.of(V1)
    c2 = VersionCondition.of(V2)
    combined = c1.combine(c2)
    assert combined.versions == frozenset({V1, V2})
    assert c1.versions == frozenset({V1})
    assert c2.versions == frozenset({V2})
    assert c1.combine(c1).versions == frozenset({V1})
    assert c2.combine(c1).versions == combined.versions


def test_combine_keeps_redundant_members() -> None:
    combined = VersionCondition.of(V1).combine(VersionCondition.of(V2))
    assert len(combined) == 2
    assert combined.latest_version() == V2


def test_matches_with_header(registry: VersionRegistry) -> None:
    c1 = VersionCondition.of(V1)
    c2 = VersionCondition.of(V2)
    assert c1.matches("2023-01-01", registry) is True
    assert c2.matches("2023-06-01", registry) is False
    assert c2.matches("2024-01-01", registry) is True
    assert c1.matches("2030-01-01", registry) is True


def test_matches_without_header_uses_default(registry: VersionRegistry) -> None:
    c1 = VersionCondition.of(V1)
    c2 = VersionCondition.of(V2)
    assert c1.matches(None, registry) is True
    assert c2.matches(None, registry) is True
    assert c2.matches("", registry) is True


def test_matches_malformed_header_uses_default(registry: VersionRegistry) -> None:
    assert VersionCondition.of(V2).matches("v2", registry) is True


def test_no_effective_version_never_matches() -> None:
    cond = VersionCondition.of(V1)
    assert cond.matches(None, VersionRegistry()) is False
    assert cond.matches("2023-01-01", VersionRegistry()) is False


def test_empty_condition_never_matches(registry: VersionRegistry) -> None:
    assert VersionCondition.of().matches("2024-01-01", registry) is False


def test_effective_version(registry: VersionRegistry) -> None:
    assert effective_version(None, registry) == V2
    assert effective_version("2023-02-01", registry) == V1
    assert effective_version(None, VersionRegistry()) is None


def test_latest_version() -> None:
    cond = VersionCondition.of(V2, V1, Version.of(2023, 6, 1))
    assert cond.latest_version() == V2


def test_rank_prefers_later_version() -> None:
    c1 = VersionCondition.of(V1)
    c2 = VersionCondition.of(V2)
    assert c2.rank(c1) < 0
    assert c1.rank(c2) > 0
    assert c1.rank(VersionCondition.of(V1)) == 0


def test_rank_uses_latest_member() -> None:
    wide = VersionCondition.of(Version.of(2020, 1, 1), Version.of(2024, 6, 1))
    narrow = VersionCondition.of(V2)
    assert wide.rank(narrow) < 0


def test_rank_puts_empty_conditions_last() -> None:
    empty = VersionCondition.of()
    cond = VersionCondition.of(V1)
    assert empty.rank(cond) > 0
    assert cond.rank(empty) < 0
    ordered = sorted([empty, cond], key=cmp_to_key(VersionCondition.rank))
    assert ordered == [cond, empty]


def test_str_lists_sorted_members() -> None:
    assert str(VersionCondition.of(V2, V1)) == "[2023-01-01 && 2024-01-01]"
