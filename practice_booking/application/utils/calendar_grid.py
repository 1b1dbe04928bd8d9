from __future__ import annotations

import calendar
from datetime import date

from practice_booking.domain.entities.scheduling import CalendarCell


def first_weekday_of_month(year: int, month: int) -> int:
    """Weekday of the 1st of the month, 0=Sunday..6=Saturday."""
    # date.weekday() is Monday-based
    return (date(year, month, 1).weekday() + 1) % 7


def build_calendar_grid(
    year: int,
    month: int,
    today: date,
    preferred: date | None = None,
    alternative: date | None = None,
) -> list[CalendarCell]:
    """
    Build the day cells of one month view.
    Leading blank cells (day=None) align day 1 under its weekday column; no trailing padding.
    """
    blanks = first_weekday_of_month(year, month)
    days_in_month = calendar.monthrange(year, month)[1]

    cells = [CalendarCell(day=None) for _ in range(blanks)]
    for day in range(1, days_in_month + 1):
        current = date(year, month, day)
        cells.append(
            CalendarCell(
                day=day,
                is_past=current < today,
                is_today=current == today,
                is_selected=current == preferred or current == alternative,
                is_primary_selection=current == preferred,
            )
        )
    return cells


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move the viewed month by delta months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def calendar_rows(cells: list[CalendarCell]) -> list[list[CalendarCell]]:
    return [cells[i : i + 7] for i in range(0, len(cells), 7)]
