"""
Calendar Cursor

The current (year, month, selected day) of the calendar view.

Views subscribe to the cursor and are called synchronously, in
the order they subscribed, with the name of the property that
changed ("year", "month" or "selected_day").
"""

from datetime import date
from typing import Callable, Optional

from subtrack.calendar.grid import DayRangeError, check_month, check_year, days_in_month


PropertyCallback = Callable[[str], None]


class CalendarCursor:
    """
    Year/month selection state of the calendar.

    Changing the year or the month clears the selected day.
    """

    def __init__(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
        selected_day: Optional[int] = None,
    ):
        today = date.today()
        year = today.year if year is None else year
        month = today.month if month is None else month
        check_year(year)
        check_month(month)

        self._year = year
        self._month = month
        self._selected_day: Optional[int] = None
        self._subscribers: list[PropertyCallback] = []

        if selected_day is not None:
            self.selected_day = selected_day

    def subscribe(self, callback: PropertyCallback) -> Callable[[], None]:
        """
        Register a callback for property changes.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, name: str) -> None:
        for callback in list(self._subscribers):
            callback(name)

    @property
    def year(self) -> int:
        return self._year

    @year.setter
    def year(self, value: int) -> None:
        check_year(value)
        if value == self._year:
            return
        self._year = value
        self._clear_selection()
        self._notify("year")

    @property
    def month(self) -> int:
        return self._month

    @month.setter
    def month(self, value: int) -> None:
        check_month(value)
        if value == self._month:
            return
        self._month = value
        self._clear_selection()
        self._notify("month")

    @property
    def selected_day(self) -> Optional[int]:
        return self._selected_day

    @selected_day.setter
    def selected_day(self, value: Optional[int]) -> None:
        if value is not None and not 1 <= value <= days_in_month(self._year, self._month):
            raise DayRangeError(
                f"Day {value} outside {self._year}-{self._month:02d}"
            )
        if value == self._selected_day:
            return
        self._selected_day = value
        self._notify("selected_day")

    @property
    def selected_date(self) -> Optional[date]:
        if self._selected_day is None:
            return None
        return date(self._year, self._month, self._selected_day)

    def set_month(self, year: int, month: int) -> None:
        """Jump to a month, notifying once per changed property."""
        check_year(year)
        check_month(month)
        changed = []
        if year != self._year:
            self._year = year
            changed.append("year")
        if month != self._month:
            self._month = month
            changed.append("month")
        if changed:
            self._clear_selection()
        for name in changed:
            self._notify(name)

    def _clear_selection(self) -> None:
        if self._selected_day is not None:
            self._selected_day = None
            self._notify("selected_day")

    def __repr__(self) -> str:
        return (
            f"CalendarCursor(year={self._year}, month={self._month}, "
            f"selected_day={self._selected_day})"
        )


def advance_month(cursor: CalendarCursor, delta: int = 1) -> CalendarCursor:
    """
    Move the cursor one month forward (delta=1) or back (delta=-1).

    The year rolls over in both directions and the selected day is
    cleared.

    Raises:
        YearRangeError: Moving past year 1 or year 9999; the cursor
            is left where it was
    """
    if delta not in (1, -1):
        raise ValueError(f"delta must be 1 or -1, got {delta}")

    year, month = cursor.year, cursor.month + delta
    if month > 12:
        year, month = year + 1, 1
    elif month < 1:
        year, month = year - 1, 12

    cursor.set_month(year, month)
    return cursor


def toggle_selected_day(cursor: CalendarCursor, day: int) -> CalendarCursor:
    """Select the day, or clear the selection if it is already selected."""
    if cursor.selected_day == day:
        cursor.selected_day = None
    else:
        cursor.selected_day = day
    return cursor
