"""Drives the booking form: dependent resource list, submit and cancel."""
from __future__ import annotations

import datetime as dt
import logging
from enum import Enum
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel, TypeAdapter, ValidationError

from common.cache import SimpleTTLCache
from common.catalog import ResourceCatalog
from common.repository import BookingConflictError, BookingRepository, BookingValidationError
from common.schemas import Booking, BookingCreate, BookingForm, DisplayRow, FormMessage
from common.views import BookingFilter, render

logger = logging.getLogger("bookings.form")

SUCCESS_COLOR = "green"
ERROR_COLOR = "red"

_clock_time = TypeAdapter(dt.time)

# error locations may use either the field name or its alias
_FIELD_LABELS = {
    "staff_name": "staff name",
    "staffName": "staff name",
    "resource_type": "resource type",
    "resourceType": "resource type",
    "resource": "resource",
    "date": "date",
    "start_time": "start time",
    "startTime": "start time",
    "end_time": "end time",
    "endTime": "end time",
}


class SubmissionState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    REJECTED_VALIDATION = "rejected_validation"
    REJECTED_CONFLICT = "rejected_conflict"
    ACCEPTED = "accepted"


class SubmissionOutcome(BaseModel):
    state: SubmissionState
    message: FormMessage
    form: BookingForm
    booking: Optional[Booking] = None
    rows: Optional[List[DisplayRow]] = None

    @property
    def accepted(self) -> bool:
        return self.state is SubmissionState.ACCEPTED


def cancel_url(booking_id: int) -> str:
    return f"/form/bookings/{booking_id}/cancel"


def _parse_times(form: BookingForm) -> Optional[Tuple[dt.time, dt.time]]:
    """Start and end to the minute, or None when either does not parse."""
    try:
        start = _clock_time.validate_python(form.start_time)
        end = _clock_time.validate_python(form.end_time)
    except ValidationError:
        return None
    return (
        start.replace(second=0, microsecond=0, tzinfo=None),
        end.replace(second=0, microsecond=0, tzinfo=None),
    )


class BookingFormController:
    def __init__(
        self,
        repository: BookingRepository,
        catalog: ResourceCatalog,
        messages: SimpleTTLCache[FormMessage],
        today: Callable[[], dt.date] = dt.date.today,
    ) -> None:
        self.repository = repository
        self.catalog = catalog
        self.messages = messages
        self._today = today
        self.state = SubmissionState.IDLE

    def today(self) -> dt.date:
        return self._today()

    def resource_options(self, resource_type: Optional[str]) -> List[str]:
        return self.catalog.options(resource_type)

    def default_form(self) -> BookingForm:
        return BookingForm(date=self.today().isoformat())

    def message_for(self, client_key: str) -> Optional[FormMessage]:
        """The client's latest message, or None once it has expired."""
        return self.messages.get(client_key)

    def view(self, booking_filter: BookingFilter = BookingFilter.TODAY) -> List[DisplayRow]:
        return render(booking_filter, self.repository.list(), self.today(), cancel_url=cancel_url)

    def submit(self, form: BookingForm, client_key: str) -> SubmissionOutcome:
        self.state = SubmissionState.VALIDATING
        form = form.model_copy(update={"staff_name": form.staff_name.strip()})
        try:
            outcome = self._process(form)
        finally:
            self.state = SubmissionState.IDLE
        # rejections are shown inline on the re-rendered page only
        if outcome.accepted:
            self.messages.set(client_key, outcome.message)
        else:
            self.messages.pop(client_key)
        return outcome

    def cancel(self, booking_id: int, confirmed: bool) -> bool:
        """Cancel after explicit confirmation; returns whether anything was attempted."""
        if not confirmed:
            logger.info("Cancellation of booking %s not confirmed", booking_id)
            return False
        self.repository.cancel(booking_id)
        return True

    def _process(self, form: BookingForm) -> SubmissionOutcome:
        times = _parse_times(form)
        if times is not None and times[0] >= times[1]:
            return self._rejected(
                SubmissionState.REJECTED_VALIDATION, f"Error: {BookingValidationError.message}", form
            )

        try:
            data = BookingCreate(**form.model_dump())
        except ValidationError as exc:
            field = str(exc.errors()[0]["loc"][0]) if exc.errors() else ""
            label = _FIELD_LABELS.get(field, "input")
            return self._rejected(SubmissionState.REJECTED_VALIDATION, f"Error: Please provide a valid {label}.", form)

        try:
            booking = self.repository.create(data)
        except BookingValidationError as exc:
            return self._rejected(SubmissionState.REJECTED_VALIDATION, f"Error: {exc.message}", form)
        except BookingConflictError as exc:
            clash = exc.conflicting
            text = (
                f"Error: {exc.message} "
                f"{clash.resource} is booked {clash.start_time.strftime('%H:%M')} - {clash.end_time.strftime('%H:%M')}."
            )
            return self._rejected(SubmissionState.REJECTED_CONFLICT, text, form)

        return SubmissionOutcome(
            state=SubmissionState.ACCEPTED,
            message=FormMessage(text="Booking created successfully!", color=SUCCESS_COLOR),
            form=self.default_form(),
            booking=booking,
            rows=self.view(BookingFilter.TODAY),
        )

    def _rejected(self, state: SubmissionState, text: str, form: BookingForm) -> SubmissionOutcome:
        logger.info("Booking form rejected (%s): %s", state.value, text)
        return SubmissionOutcome(state=state, message=FormMessage(text=text, color=ERROR_COLOR), form=form)
