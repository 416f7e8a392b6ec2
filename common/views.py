"""Pure filtering, sorting and formatting of bookings for display.

Nothing here touches the store or the web layer: callers pass the collection
and today's date, and get back rows ready to be placed into HTML.
"""
from __future__ import annotations

import datetime as dt
import html
from enum import Enum
from typing import Callable, Iterable, List, Optional

from .schemas import Booking, DisplayRow

NO_BOOKINGS_TEXT = "No bookings found."


class BookingFilter(str, Enum):
    TODAY = "today"
    TOMORROW = "tomorrow"
    UPCOMING = "upcoming"

    @property
    def heading(self) -> str:
        return _HEADINGS[self]


_HEADINGS = {
    BookingFilter.TODAY: "Today's Bookings",
    BookingFilter.TOMORROW: "Tomorrow's Bookings",
    BookingFilter.UPCOMING: "All Upcoming Bookings",
}


def filter_bookings(bookings: Iterable[Booking], booking_filter: BookingFilter, today: dt.date) -> List[Booking]:
    if booking_filter is BookingFilter.TODAY:
        return [booking for booking in bookings if booking.date == today]
    if booking_filter is BookingFilter.TOMORROW:
        tomorrow = today + dt.timedelta(days=1)
        return [booking for booking in bookings if booking.date == tomorrow]
    # upcoming keeps every booking of today, whether or not it has started
    return [booking for booking in bookings if booking.date >= today]


def sort_bookings(bookings: Iterable[Booking]) -> List[Booking]:
    return sorted(bookings, key=lambda booking: (booking.date, booking.start_time))


def format_date(value: dt.date) -> str:
    return value.strftime("%d/%m/%Y")


def format_time_range(booking: Booking) -> str:
    return f"{booking.start_time.strftime('%H:%M')} - {booking.end_time.strftime('%H:%M')}"


def to_display_row(booking: Booking, cancel_url: Optional[Callable[[int], str]] = None) -> DisplayRow:
    return DisplayRow(
        booking_id=booking.id,
        staff_name=html.escape(booking.staff_name),
        resource=html.escape(booking.resource),
        date=format_date(booking.date),
        time_range=format_time_range(booking),
        cancel_action=cancel_url(booking.id) if cancel_url else None,
    )


def render(
    booking_filter: BookingFilter,
    bookings: Iterable[Booking],
    today: dt.date,
    cancel_url: Optional[Callable[[int], str]] = None,
) -> List[DisplayRow]:
    """Rows for the given filter, ordered by date then start time.

    An empty selection yields a single placeholder row.
    """
    selected = sort_bookings(filter_bookings(bookings, booking_filter, today))
    if not selected:
        return [DisplayRow(placeholder=True, text=NO_BOOKINGS_TEXT)]
    return [to_display_row(booking, cancel_url) for booking in selected]
