"""
Clock and calendar arithmetic for shifts.

Shifts are stored as a date plus wall-clock start/end times with minute
precision. An end time at or before the start time means the shift crosses
midnight; equal times denote exactly 24 hours (guard duty convention).
All functions here are pure and total for well-formed times.
"""
from datetime import date, datetime, time, timedelta

MINUTES_PER_DAY = 24 * 60

# Night window 21:00–06:00 (Code du travail, IDCC 3239)
NIGHT_START_MINUTES = 21 * 60
NIGHT_END_MINUTES = 6 * 60

# Night windows laid over a two-day span [0, 2 * 1440), enough for any
# shift starting on day one.
_NIGHT_WINDOWS = (
    (0, NIGHT_END_MINUTES),
    (NIGHT_START_MINUTES, MINUTES_PER_DAY + NIGHT_END_MINUTES),
    (MINUTES_PER_DAY + NIGHT_START_MINUTES, 2 * MINUTES_PER_DAY),
)


def parse_hhmm(value: str) -> time:
    """Parses "HH:MM" (or "HH:MM:SS"); raises ValueError when malformed."""
    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid time: {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Invalid time: {value!r}")
    return time(hours, minutes)


def to_minutes(value: time | str) -> int:
    """Minutes since midnight."""
    if isinstance(value, str):
        value = parse_hhmm(value)
    return value.hour * 60 + value.minute


def minutes_to_time(minutes: int) -> time:
    minutes %= MINUTES_PER_DAY
    return time(minutes // 60, minutes % 60)


def crosses_midnight(start: time | str, end: time | str) -> bool:
    return to_minutes(end) <= to_minutes(start)


def _span(start: time | str, end: time | str) -> tuple[int, int]:
    s = to_minutes(start)
    e = to_minutes(end)
    if e <= s:
        e += MINUTES_PER_DAY
    return s, e


def span_minutes(start: time | str, end: time | str) -> int:
    """Wall-clock length of a shift, breaks not deducted."""
    s, e = _span(start, end)
    return e - s


def duration(start: time | str, end: time | str, break_minutes: int = 0) -> int:
    """
    Worked minutes of a shift.

    end <= start crosses midnight, so start == end yields 1440 minutes.
    The result never drops below zero, however long the break.
    """
    return max(0, span_minutes(start, end) - (break_minutes or 0))


def night_overlap(shift_date: date | None, start: time | str, end: time | str) -> int:
    """
    Minutes of the shift falling inside the 21:00–06:00 night window.

    The window does not depend on the calendar date; the argument is kept so
    callers can pass a shift as-is.
    """
    s, e = _span(start, end)
    total = 0
    for w_start, w_end in _NIGHT_WINDOWS:
        total += max(0, min(e, w_end) - max(s, w_start))
    return total


def shift_bounds(shift_date: date, start: time | str, end: time | str) -> tuple[datetime, datetime]:
    """Absolute start/end datetimes of a shift."""
    s, e = _span(start, end)
    day = datetime.combine(shift_date, time(0, 0))
    return day + timedelta(minutes=s), day + timedelta(minutes=e)


def bounds_of(shift) -> tuple[datetime, datetime]:
    return shift_bounds(shift.date, shift.start_time, shift.end_time)


def intervals_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Half-open interval intersection; touching intervals do not overlap."""
    return a_start < b_end and b_start < a_end


def shifts_overlap(a, b) -> bool:
    a_start, a_end = bounds_of(a)
    b_start, b_end = bounds_of(b)
    return intervals_overlap(a_start, a_end, b_start, b_end)


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


def week_bounds(d: date) -> tuple[date, date]:
    """Monday and Sunday of the ISO week containing ``d``."""
    monday = d - timedelta(days=d.weekday())
    return monday, monday + timedelta(days=6)


def minutes_by_day(shift_date: date, start: time | str, end: time | str) -> dict[date, int]:
    """Splits a shift's wall-clock minutes over the calendar days it touches."""
    start_dt, end_dt = shift_bounds(shift_date, start, end)
    result: dict[date, int] = {}
    current = start_dt
    while current < end_dt:
        next_midnight = datetime.combine(current.date() + timedelta(days=1), time(0, 0))
        chunk_end = min(next_midnight, end_dt)
        result[current.date()] = result.get(current.date(), 0) + int(
            (chunk_end - current).total_seconds() // 60
        )
        current = chunk_end
    return result


def format_time(value: time) -> str:
    return value.strftime("%H:%M")
