"""Booking persistence over a local string-keyed store.

The store mirrors a browser ``localStorage``: one namespaced key holds the whole
booking collection serialized as a JSON array. Every write replaces the value.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol, Sequence

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from .models import StoredEntry
from .schemas import Booking

logger = logging.getLogger("bookings.storage")

_booking_list = TypeAdapter(List[Booking])


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class BookingStorage(Protocol):
    def load(self) -> List[Booking]: ...

    def save(self, bookings: Sequence[Booking]) -> None: ...


class SqlKeyValueStore:
    """Key/value store kept in the ``stored_entries`` table."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get_item(self, key: str) -> Optional[str]:
        with self._session_factory() as db:
            entry = db.get(StoredEntry, key)
            return entry.value if entry else None

    def set_item(self, key: str, value: str) -> None:
        with self._session_factory() as db:
            entry = db.get(StoredEntry, key)
            if entry is None:
                db.add(StoredEntry(key=key, value=value))
            else:
                entry.value = value
            db.commit()

    def remove_item(self, key: str) -> None:
        with self._session_factory() as db:
            entry = db.get(StoredEntry, key)
            if entry is not None:
                db.delete(entry)
                db.commit()


class KeyValueBookingStorage:
    def __init__(self, store: KeyValueStore, namespace: str) -> None:
        self._store = store
        self.namespace = namespace

    def load(self) -> List[Booking]:
        raw = self._store.get_item(self.namespace)
        if not raw:
            return []
        try:
            return _booking_list.validate_json(raw)
        except ValidationError as exc:
            logger.warning("Discarding unreadable booking data under %r: %s", self.namespace, exc.error_count())
            return []

    def save(self, bookings: Sequence[Booking]) -> None:
        payload = _booking_list.dump_json(list(bookings), by_alias=True)
        self._store.set_item(self.namespace, payload.decode("utf-8"))
