"""
Версия API, идентифицируемая календарной датой.

Назначение:
- неизменяемое значение (дата + каноническая строка YYYY-MM-DD)
- равенство, хэш и порядок только по дате
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime

VERSION_FORMAT = "%Y-%m-%d"

_VERSION_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True, order=True)
class Version:
    """
    Версия API. Две версии с одной датой взаимозаменяемы.
    """

    date: date
    value: str = field(init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.date, date):
            raise TypeError(f"Version date must be datetime.date, got {type(self.date).__name__}")
        if isinstance(self.date, datetime):
            object.__setattr__(self, "date", self.date.date())
        object.__setattr__(self, "value", self.date.strftime(VERSION_FORMAT))

    @classmethod
    def of(cls, year: int, month: int, day: int) -> Version:
        return cls(date(year, month, day))

    @classmethod
    def parse(cls, text: str) -> Version:
        """
        Строгий разбор YYYY-MM-DD (пробелы по краям игнорируются).
        Любой другой формат -> ValueError.
        """
        raw = (text or "").strip()
        if not _VERSION_RE.match(raw):
            raise ValueError(f"Invalid API version {text!r}, expected YYYY-MM-DD")
        return cls(date.fromisoformat(raw))

    def __str__(self) -> str:
        return self.value
