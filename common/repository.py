"""Create, list and cancel bookings over an injected storage backend."""
from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from .catalog import ResourceCatalog
from .conflicts import find_conflict
from .schemas import Booking, BookingCreate
from .storage import BookingStorage

logger = logging.getLogger("bookings.repository")


class BookingError(Exception):
    """Base class for recoverable booking errors shown to the user."""

    message = "Booking could not be saved"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class BookingValidationError(BookingError):
    message = "End time must be after start time."


class BookingConflictError(BookingError):
    message = "This resource is already booked for the selected time."

    def __init__(self, conflicting: Booking) -> None:
        super().__init__()
        self.conflicting = conflicting


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


class BookingRepository:
    def __init__(
        self,
        storage: BookingStorage,
        catalog: Optional[ResourceCatalog] = None,
        clock: Callable[[], int] = _epoch_millis,
    ) -> None:
        self._storage = storage
        self._catalog = catalog
        self._clock = clock

    def list(self) -> List[Booking]:
        return self._storage.load()

    def create(self, data: BookingCreate) -> Booking:
        """Validate, check for conflicts and persist a new booking.

        Raises BookingValidationError or BookingConflictError without writing
        anything when the booking cannot be accepted.
        """
        if data.start_time >= data.end_time:
            raise BookingValidationError()
        if self._catalog is not None and not self._catalog.contains(data.resource_type, data.resource):
            raise BookingValidationError(f"Unknown {data.resource_type.value}: {data.resource}")

        bookings = self._storage.load()
        conflicting = find_conflict(data, bookings)
        if conflicting is not None:
            logger.info(
                "Rejected %s on %s %s-%s: overlaps booking %s",
                data.resource,
                data.date.isoformat(),
                data.start_time.strftime("%H:%M"),
                data.end_time.strftime("%H:%M"),
                conflicting.id,
            )
            raise BookingConflictError(conflicting)

        booking = Booking(id=self._next_id(bookings), **data.model_dump())
        bookings.append(booking)
        self._storage.save(bookings)
        logger.info("Created booking %s for %s on %s", booking.id, booking.resource, booking.date.isoformat())
        return booking

    def cancel(self, booking_id: int) -> None:
        bookings = self._storage.load()
        remaining = [booking for booking in bookings if booking.id != booking_id]
        self._storage.save(remaining)
        if len(remaining) != len(bookings):
            logger.info("Cancelled booking %s", booking_id)

    def _next_id(self, bookings: List[Booking]) -> int:
        candidate = self._clock()
        highest = max((booking.id for booking in bookings), default=None)
        if highest is not None and candidate <= highest:
            return highest + 1
        return candidate
