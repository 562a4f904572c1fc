"""Calendar grid and cursor."""

from subtrack.calendar.cursor import (
    CalendarCursor,
    advance_month,
    toggle_selected_day,
)
from subtrack.calendar.grid import (
    MONTH_NAMES,
    WEEKDAY_ABBREVIATIONS,
    CalendarGrid,
    DayCell,
    DayRangeError,
    HeaderCell,
    MonthRangeError,
    YearRangeError,
    build_grid,
    days_in_month,
    month_name,
    month_number,
    place_day,
    row_count,
    weekday_offset,
)

__all__ = [
    "CalendarCursor",
    "CalendarGrid",
    "DayCell",
    "DayRangeError",
    "HeaderCell",
    "MONTH_NAMES",
    "MonthRangeError",
    "WEEKDAY_ABBREVIATIONS",
    "YearRangeError",
    "advance_month",
    "build_grid",
    "days_in_month",
    "month_name",
    "month_number",
    "place_day",
    "row_count",
    "toggle_selected_day",
    "weekday_offset",
]
