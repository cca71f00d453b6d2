"""Month grid generation for the calendar view.

A month is laid out Sunday-first in at most six week rows of seven cells.
Cells before the first day and after the last day are empty; every other
cell holds its date and the events visible to the requester, ordered by
time of day.
"""
import calendar
import datetime as dt
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from permissions import Actor, can_view

WEEKS_PER_GRID = 6
DAYS_PER_WEEK = 7


class InvalidMonthError(ValueError):
    """Raised for a year/month pair that cannot be laid out."""


@dataclass
class DayCell:
    is_empty: bool
    date: Optional[dt.date] = None
    day_number: Optional[int] = None
    is_weekend: bool = False
    is_today: bool = False
    is_selected: bool = False
    events: list = field(default_factory=list)


def _validate(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise InvalidMonthError(f"month must be between 1 and 12, got {month}")
    if not dt.MINYEAR <= year <= dt.MAXYEAR:
        raise InvalidMonthError(f"year must be between {dt.MINYEAR} and {dt.MAXYEAR}, got {year}")


def days_in_month(year: int, month: int) -> int:
    _validate(year, month)
    return calendar.monthrange(year, month)[1]


def first_weekday(year: int, month: int) -> int:
    """Weekday of the 1st, counted from Sunday = 0."""
    _validate(year, month)
    # calendar counts from Monday = 0
    return (calendar.weekday(year, month, 1) + 1) % 7


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move ``delta`` months forward (or back), rolling the year over."""
    _validate(year, month)
    index = year * 12 + (month - 1) + delta
    new_year, new_month = divmod(index, 12)
    new_month += 1
    _validate(new_year, new_month)
    return new_year, new_month


def time_key(event) -> int:
    return event.time.hour * 100 + event.time.minute


def build_month_grid(
    year: int,
    month: int,
    events: Iterable,
    actor: Optional[Actor] = None,
    *,
    today: Optional[dt.date] = None,
    selected: Optional[dt.date] = None,
) -> List[List[DayCell]]:
    """Lay out ``year``/``month`` and drop each visible event into its day cell.

    ``events`` may contain events from other months; they are ignored.
    Private events are only placed when ``actor`` owns them.
    """
    last_day = days_in_month(year, month)
    offset = first_weekday(year, month)
    today = today or dt.date.today()

    by_date = {}
    for event in events:
        if can_view(actor, event):
            by_date.setdefault(event.date, []).append(event)

    weeks = []
    day_count = 1
    for week in range(WEEKS_PER_GRID):
        row = []
        for column in range(DAYS_PER_WEEK):
            if (week == 0 and column < offset) or day_count > last_day:
                row.append(DayCell(is_empty=True))
                continue

            cell_date = dt.date(year, month, day_count)
            row.append(DayCell(
                is_empty=False,
                date=cell_date,
                day_number=day_count,
                is_weekend=column in (0, DAYS_PER_WEEK - 1),
                is_today=cell_date == today,
                is_selected=cell_date == selected,
                # sorted() is stable, so equal times keep their input order
                events=sorted(by_date.get(cell_date, []), key=time_key),
            ))
            day_count += 1
        weeks.append(row)

        if day_count > last_day:
            break
    return weeks
