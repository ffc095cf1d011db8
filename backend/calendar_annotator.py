"""
Calendar annotations for the timeline view.
Pure functions: which days have entries and which workdays were missed.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional


@dataclass(frozen=True)
class CalendarAnnotations:
    highlighted_days: frozenset
    missed_days: frozenset


@dataclass(frozen=True)
class CalendarDay:
    date: date
    status: Optional[str] = None  # 'entry', 'missed', 'weekend' or None


def day_of(value) -> date:
    """Truncate a date or datetime to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def is_weekend(day: date) -> bool:
    # Saturday (5) and Sunday (6); the work week is not configurable
    return day.weekday() >= 5


def compute_annotations(
    entries: Iterable, year: int, month: int, today: Optional[date] = None
) -> CalendarAnnotations:
    """
    Compute highlighted and missed days for a displayed month.

    Args:
        entries: All of the user's entries (anything with a `date` attribute),
            not only the displayed month; the earliest entry bounds the
            tracking window.
        year: Displayed year
        month: Displayed month (1-12)
        today: Current day, defaults to date.today()

    Returns:
        highlighted_days covers every day with an entry; missed_days covers
        weekdays of the displayed month after the first entry and before
        today that have no entry.
    """
    if today is None:
        today = date.today()

    days_with_entries = frozenset(day_of(entry.date) for entry in entries)
    if not days_with_entries:
        return CalendarAnnotations(highlighted_days=days_with_entries, missed_days=frozenset())

    earliest_entry_date = min(days_with_entries)
    _, days_in_month = calendar.monthrange(year, month)

    missed = set()
    for day_num in range(1, days_in_month + 1):
        current = date(year, month, day_num)
        if is_weekend(current):
            continue
        if current <= earliest_entry_date or current >= today:
            continue
        if current in days_with_entries:
            continue
        missed.add(current)

    return CalendarAnnotations(highlighted_days=days_with_entries, missed_days=frozenset(missed))


def day_status(day: date, annotations: CalendarAnnotations) -> Optional[str]:
    if day in annotations.highlighted_days:
        return "entry"
    if day in annotations.missed_days:
        return "missed"
    if is_weekend(day):
        return "weekend"
    return None


def month_grid(year: int, month: int, annotations: CalendarAnnotations) -> List[List[Optional[CalendarDay]]]:
    """
    Generate the Monday-first calendar grid for a month.

    Returns:
        List of weeks, each containing 7 cells (None for days outside the month)
    """
    grid = []
    for week in calendar.monthcalendar(year, month):
        week_days = []
        for day_num in week:
            if day_num == 0:
                week_days.append(None)
            else:
                current = date(year, month, day_num)
                week_days.append(CalendarDay(date=current, status=day_status(current, annotations)))
        grid.append(week_days)
    return grid
