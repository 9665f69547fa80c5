from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date, timedelta

HolidayPredicate = Callable[[date], bool]

# South African public holidays with a fixed calendar date (month, day).
SA_FIXED_HOLIDAYS: list[tuple[int, int, str]] = [
    (1, 1, "New Year's Day"),
    (3, 21, "Human Rights Day"),
    (4, 27, "Freedom Day"),
    (5, 1, "Workers' Day"),
    (6, 16, "Youth Day"),
    (8, 9, "National Women's Day"),
    (9, 24, "Heritage Day"),
    (12, 16, "Day of Reconciliation"),
    (12, 25, "Christmas Day"),
    (12, 26, "Day of Goodwill"),
]


def easter_sunday(year: int) -> date:
    """Gregorian Easter Sunday (anonymous Gregorian algorithm)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    r = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * r) // 451
    month, day = divmod(h + r - 7 * m + 114, 31)
    return date(year, month, day + 1)


def south_african_holidays(years: Iterable[int]) -> frozenset[date]:
    days: set[date] = set()
    for year in years:
        for month, day, _name in SA_FIXED_HOLIDAYS:
            holiday = date(year, month, day)
            days.add(holiday)
            # A holiday falling on a Sunday is observed on the Monday.
            if holiday.isoweekday() == 7:
                days.add(holiday + timedelta(days=1))
        easter = easter_sunday(year)
        days.add(easter - timedelta(days=2))  # Good Friday
        days.add(easter + timedelta(days=1))  # Family Day
    return frozenset(days)


class HolidayCalendar:
    """Holiday predicate over a fixed set of dates."""

    def __init__(self, days: Iterable[date]) -> None:
        self._days = frozenset(days)

    def __call__(self, day: date) -> bool:
        return day in self._days

    def __len__(self) -> int:
        return len(self._days)

    @classmethod
    def south_africa(cls, first_year: int = 2020, last_year: int = 2030) -> HolidayCalendar:
        return cls(south_african_holidays(range(first_year, last_year + 1)))


def no_holidays(day: date) -> bool:
    return False
