"""Time-range conflict detection for bookings of the same resource."""
from __future__ import annotations

import datetime as dt
from typing import Iterable, Optional

from .schemas import Booking, BookingBase


def intervals_overlap(start: dt.time, end: dt.time, other_start: dt.time, other_end: dt.time) -> bool:
    """Half-open overlap: [09:00, 10:00) and [10:00, 11:00) do not overlap."""
    return start < other_end and end > other_start


def find_conflict(candidate: BookingBase, existing: Iterable[Booking]) -> Optional[Booking]:
    for booking in existing:
        if booking.resource != candidate.resource or booking.date != candidate.date:
            continue
        if intervals_overlap(candidate.start_time, candidate.end_time, booking.start_time, booking.end_time):
            return booking
    return None


def has_conflict(candidate: BookingBase, existing: Iterable[Booking]) -> bool:
    return find_conflict(candidate, existing) is not None
