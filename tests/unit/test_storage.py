"""Unit tests for the key/value store and booking storage adapter."""
import json

import pytest

from common.storage import KeyValueBookingStorage, SqlKeyValueStore

NAMESPACE = "globalmicro_bookings"


class TestSqlKeyValueStore:
    """The SQL-backed string store."""

    def test_missing_key_returns_none(self, session_factory):
        store = SqlKeyValueStore(session_factory)
        assert store.get_item("absent") is None

    def test_set_and_overwrite(self, session_factory):
        store = SqlKeyValueStore(session_factory)
        store.set_item("key", "first")
        store.set_item("key", "second")
        assert store.get_item("key") == "second"

    def test_remove_item(self, session_factory):
        store = SqlKeyValueStore(session_factory)
        store.set_item("key", "value")
        store.remove_item("key")
        store.remove_item("key")
        assert store.get_item("key") is None


class TestKeyValueBookingStorage:
    """Loading and saving the whole booking collection."""

    def test_load_empty_store(self, memory_store):
        assert KeyValueBookingStorage(memory_store, NAMESPACE).load() == []

    def test_round_trip(self, memory_store, make_booking):
        storage = KeyValueBookingStorage(memory_store, NAMESPACE)
        bookings = [
            make_booking(),
            make_booking(staff_name="Bob", resource_type="equipment", resource="Projector", start_time="13:15", end_time="14:45"),
        ]
        storage.save(bookings)
        assert storage.load() == bookings

    def test_round_trip_through_sql_store(self, session_factory, make_booking):
        storage = KeyValueBookingStorage(SqlKeyValueStore(session_factory), NAMESPACE)
        bookings = [make_booking(), make_booking(start_time="10:00", end_time="11:00")]
        storage.save(bookings)
        assert storage.load() == bookings

    def test_saved_record_layout(self, memory_store, make_booking):
        storage = KeyValueBookingStorage(memory_store, NAMESPACE)
        storage.save([make_booking(id=1718000000000)])

        records = json.loads(memory_store.items[NAMESPACE])
        assert records == [
            {
                "id": 1718000000000,
                "staffName": "Alice",
                "resourceType": "room",
                "resource": "Boardroom A",
                "date": "2024-06-10",
                "startTime": "09:00",
                "endTime": "10:00",
            }
        ]

    def test_save_overwrites_previous_collection(self, memory_store, make_booking):
        storage = KeyValueBookingStorage(memory_store, NAMESPACE)
        storage.save([make_booking(), make_booking(start_time="11:00", end_time="12:00")])
        storage.save([])
        assert storage.load() == []

    @pytest.mark.parametrize(
        "raw",
        [
            "not json at all",
            '{"id": 1}',
            '[{"id": 1}]',
            '[{"id": 1, "staffName": "A", "resourceType": "boat", "resource": "X", '
            '"date": "2024-06-10", "startTime": "09:00", "endTime": "10:00"}]',
        ],
    )
    def test_unreadable_data_loads_as_empty(self, memory_store, raw):
        memory_store.items[NAMESPACE] = raw
        assert KeyValueBookingStorage(memory_store, NAMESPACE).load() == []

    def test_reads_records_written_by_the_browser_form(self, memory_store):
        memory_store.items[NAMESPACE] = json.dumps(
            [
                {
                    "id": 1717999999999,
                    "staffName": "Alice",
                    "resourceType": "room",
                    "resource": "Boardroom A",
                    "date": "2024-06-10",
                    "startTime": "09:00",
                    "endTime": "10:00",
                }
            ]
        )
        (booking,) = KeyValueBookingStorage(memory_store, NAMESPACE).load()
        assert booking.id == 1717999999999
        assert booking.staff_name == "Alice"
        assert booking.start_time.isoformat() == "09:00:00"

    def test_free_text_names_are_read_back(self, memory_store):
        memory_store.items[NAMESPACE] = json.dumps(
            [
                {
                    "id": 1,
                    "staffName": "Alice",
                    "resourceType": "room",
                    "resource": "Boardroom A",
                    "date": "2024-06-10",
                    "startTime": "08:00",
                    "endTime": "09:00",
                },
                {
                    "id": 2,
                    "staffName": "",
                    "resourceType": "room",
                    "resource": "Boardroom A",
                    "date": "2024-06-10",
                    "startTime": "09:00",
                    "endTime": "10:00",
                },
            ]
        )
        bookings = KeyValueBookingStorage(memory_store, NAMESPACE).load()
        assert [booking.staff_name for booking in bookings] == ["Alice", ""]

    def test_long_name_round_trip(self, memory_store, make_booking):
        storage = KeyValueBookingStorage(memory_store, NAMESPACE)
        bookings = [make_booking(staff_name="x" * 101), make_booking(start_time="10:00", end_time="11:00")]
        storage.save(bookings)
        assert storage.load() == bookings

    def test_padded_name_round_trip(self, memory_store, make_booking):
        storage = KeyValueBookingStorage(memory_store, NAMESPACE)
        bookings = [make_booking(staff_name="  Alice  ")]
        storage.save(bookings)
        assert storage.load() == bookings

    def test_stored_keys_lead_with_id(self, memory_store, make_booking):
        KeyValueBookingStorage(memory_store, NAMESPACE).save([make_booking()])

        (record,) = json.loads(memory_store.items[NAMESPACE])
        assert list(record) == ["id", "staffName", "resourceType", "resource", "date", "startTime", "endTime"]
