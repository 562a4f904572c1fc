"""
Calendar Grid Builder

Pure calendar calculations, no UI and no storage.

The grid is 7 columns wide, Monday first. Row 0 always holds the
weekday headers; day numbers start on row 1. A renderer only has
to walk the cells of a CalendarGrid and put each one at its
(row, column).
"""

import calendar
import math
from datetime import MAXYEAR, MINYEAR, date
from typing import Optional

from pydantic import BaseModel, Field


WEEKDAY_ABBREVIATIONS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

HEADER_ROW = 0


class MonthRangeError(ValueError):
    """Month outside 1-12. A programming error, not a user error."""
    pass


class DayRangeError(ValueError):
    """Day outside the days of the month."""
    pass


class YearRangeError(ValueError):
    """Year outside what datetime.date can represent (1-9999)."""
    pass


# =============================================================================
# GRID MODELS
# =============================================================================

class HeaderCell(BaseModel):
    """Weekday name on the header row."""

    label: str
    row: int = HEADER_ROW
    column: int = Field(..., ge=0, le=6)


class DayCell(BaseModel):
    """One day number placed on the grid."""

    day: int = Field(..., ge=1, le=31)
    row: int = Field(..., ge=1)
    column: int = Field(..., ge=0, le=6)
    is_today: bool = False
    is_selected: bool = False


class CalendarGrid(BaseModel):
    """Renderable month: headers on row 0, days below."""

    year: int
    month: int = Field(..., ge=1, le=12)
    rows: int
    offset: int = Field(..., ge=0, le=6)
    headers: list[HeaderCell]
    days: list[DayCell]

    @property
    def title(self) -> str:
        return f"{month_name(self.month)} {self.year}"

    def weeks(self) -> list[list[Optional[DayCell]]]:
        """Day cells grouped by grid row, with None for empty slots."""
        weeks: list[list[Optional[DayCell]]] = [
            [None] * 7 for _ in range(self.rows - 1)
        ]
        for cell in self.days:
            weeks[cell.row - 1][cell.column] = cell
        return weeks


# =============================================================================
# DATE ARITHMETIC
# =============================================================================

def check_month(month: int) -> None:
    if not 1 <= month <= 12:
        raise MonthRangeError(f"Month must be between 1 and 12, got {month}")


def check_year(year: int) -> None:
    if not MINYEAR <= year <= MAXYEAR:
        raise YearRangeError(f"Year must be between {MINYEAR} and {MAXYEAR}, got {year}")


def days_in_month(year: int, month: int) -> int:
    """Number of days in the month, leap years included."""
    check_year(year)
    check_month(month)
    return calendar.monthrange(year, month)[1]


def weekday_offset(year: int, month: int) -> int:
    """
    Column of day 1: Monday = 0 ... Sunday = 6.

    Most calendars count Sunday as 0. That count is remapped here so
    Sunday lands in the last column.
    """
    check_year(year)
    check_month(month)
    sunday_first = (date(year, month, 1).weekday() + 1) % 7
    return 6 if sunday_first == 0 else sunday_first - 1


def row_count(year: int, month: int) -> int:
    """Rows needed for the month, header row included."""
    return math.ceil((days_in_month(year, month) + weekday_offset(year, month)) / 7) + 1


def place_day(day_index: int, year: int, month: int) -> tuple[int, int]:
    """
    Grid position of a day.

    Args:
        day_index: Zero-based day (0 is the 1st of the month)

    Returns:
        (row, column), row starting at 1 below the header
    """
    total = days_in_month(year, month)
    if not 0 <= day_index < total:
        raise DayRangeError(
            f"Day index {day_index} outside {year}-{month:02d} (0-{total - 1})"
        )
    position = day_index + weekday_offset(year, month)
    return position // 7 + 1, position % 7


def month_name(month: int) -> str:
    check_month(month)
    return MONTH_NAMES[month - 1]


def month_number(name: str) -> int:
    """Inverse of month_name, case-insensitive."""
    lowered = name.strip().lower()
    for index, candidate in enumerate(MONTH_NAMES, start=1):
        if candidate.lower() == lowered:
            return index
    raise MonthRangeError(f"Unknown month name: {name!r}")


def build_grid(
    year: int,
    month: int,
    today: Optional[date] = None,
    selected_day: Optional[int] = None,
) -> CalendarGrid:
    """
    Build the renderable grid for a month.

    Args:
        today: Day to highlight (defaults to the current date)
        selected_day: Day number currently selected, if any
    """
    today = today or date.today()
    total = days_in_month(year, month)

    headers = [
        HeaderCell(label=label, column=column)
        for column, label in enumerate(WEEKDAY_ABBREVIATIONS)
    ]

    days = []
    for index in range(total):
        row, column = place_day(index, year, month)
        day = index + 1
        days.append(DayCell(
            day=day,
            row=row,
            column=column,
            is_today=(today.year, today.month, today.day) == (year, month, day),
            is_selected=selected_day == day,
        ))

    return CalendarGrid(
        year=year,
        month=month,
        rows=row_count(year, month),
        offset=weekday_offset(year, month),
        headers=headers,
        days=days,
    )
