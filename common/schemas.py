"""Pydantic schemas for bookings, form input and rendered rows."""
from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    field_serializer,
    field_validator,
    model_serializer,
)

from .models import ResourceType


class BookingBase(BaseModel):
    """Fields shared by stored bookings and create requests.

    Aliases match the keys of the stored records (``staffName``, ``startTime``...),
    snake_case names are accepted as well. Text fields are free text here so any
    stored record reads back as written; input limits live on ``BookingCreate``.
    """

    model_config = ConfigDict(populate_by_name=True)

    staff_name: str = Field(..., alias="staffName")
    resource_type: ResourceType = Field(..., alias="resourceType")
    resource: str
    date: dt.date
    start_time: dt.time = Field(..., alias="startTime")
    end_time: dt.time = Field(..., alias="endTime")

    @field_validator("start_time", "end_time")
    @classmethod
    def _minute_precision(cls, value: dt.time) -> dt.time:
        return value.replace(second=0, microsecond=0, tzinfo=None)

    @field_serializer("start_time", "end_time")
    def _hhmm(self, value: dt.time) -> str:
        return value.strftime("%H:%M")


class BookingCreate(BookingBase):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    staff_name: str = Field(..., min_length=1, max_length=100, alias="staffName")
    resource: str = Field(..., min_length=1, max_length=100)


class Booking(BookingBase):
    id: int

    # stored records lead with their id
    @model_serializer(mode="wrap")
    def _id_first(self, handler: SerializerFunctionWrapHandler):
        data = handler(self)
        if "id" not in data:
            return data
        return {"id": data.pop("id"), **data}


class DisplayRow(BaseModel):
    """A rendered table row. Text fields are already HTML-escaped."""

    booking_id: Optional[int] = None
    staff_name: str = ""
    resource: str = ""
    date: str = ""
    time_range: str = ""
    cancel_action: Optional[str] = None
    placeholder: bool = False
    text: Optional[str] = None


class BookingView(BaseModel):
    filter: str
    title: str
    rows: List[DisplayRow]


class ResourceOptions(BaseModel):
    resource_type: ResourceType
    options: List[str]


class BookingForm(BaseModel):
    """Raw values posted by the booking form, before validation."""

    staff_name: str = ""
    resource_type: str = ""
    resource: str = ""
    date: str = ""
    start_time: str = ""
    end_time: str = ""


class FormMessage(BaseModel):
    text: str
    color: str
