from __future__ import annotations

from datetime import date, datetime

import pytest

from api_version_routing.domain.version import Version


def test_version_from_string() -> None:
    v = Version.parse("2024-09-10")
    assert v.value == "2024-09-10"
    assert v.date == date(2024, 9, 10)
    assert str(v) == "2024-09-10"


def test_version_equality_is_by_date() -> None:
    assert Version.parse("2023-01-01") == Version.of(2023, 1, 1)
    assert Version(date(2023, 1, 1)) == Version(datetime(2023, 1, 1, 12, 30))
    assert len({Version.of(2023, 1, 1), Version.parse(" 2023-01-01 ")}) == 1


def test_version_ordering() -> None:
    versions = [Version.of(2024, 1, 1), Version.of(2022, 5, 10), Version.of(2023, 1, 1)]
    assert [v.value for v in sorted(versions)] == ["2022-05-10", "2023-01-01", "2024-01-01"]
    assert Version.of(2024, 1, 1) > Version.of(2023, 12, 31)


@pytest.mark.parametrize(
    "raw",
    ["", "not-a-date", "2023-1-1", "20230101", "2023-02-30", "2023-01-01T00:00:00"],
)
def test_version_parse_rejects_invalid(raw: str) -> None:
    with pytest.raises(ValueError):
        Version.parse(raw)


def test_version_requires_date() -> None:
    with pytest.raises(TypeError):
        Version("2023-01-01")  # type: ignore[arg-type]
