"""
Jours fériés (France métropolitaine).
Uses workalendar for the statutory holiday list.
"""
from datetime import date
from functools import lru_cache

from workalendar.europe import France

_CALENDAR = France()


@lru_cache(maxsize=32)
def _holidays_for_year(year: int) -> tuple[tuple[date, str], ...]:
    return tuple(_CALENDAR.holidays(year))


def get_french_holidays(year: int) -> dict[date, str]:
    """Returns every public holiday of a year, keyed by date."""
    return {d: name for d, name in _holidays_for_year(year)}


def is_holiday(d: date) -> tuple[bool, str | None]:
    """Checks whether a date is a public holiday."""
    name = get_french_holidays(d.year).get(d)
    return name is not None, name


def is_sunday(d: date) -> bool:
    return d.weekday() == 6
