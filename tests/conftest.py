import os
from datetime import date
from typing import Dict, Generator, Optional

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("RATE_LIMITING_ENABLED", "false")

from common.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from common.database import Base, SessionLocal, engine  # noqa: E402
from common.schemas import Booking  # noqa: E402
from services.bookings.app import app as bookings_app  # noqa: E402
from services.bookings.app import form_messages, get_today  # noqa: E402

TODAY = date(2024, 6, 10)


class MemoryKeyValueStore:
    """Dict-backed stand-in for the SQL key/value store."""

    def __init__(self) -> None:
        self.items: Dict[str, str] = {}
        self.reads = 0
        self.writes = 0

    def get_item(self, key: str) -> Optional[str]:
        self.reads += 1
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.writes += 1
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


@pytest.fixture(autouse=True, scope="function")
def _create_test_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    form_messages.clear()
    yield
    bookings_app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def session_factory():
    return SessionLocal


@pytest.fixture()
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def make_booking():
    counter = {"next_id": 1}

    def factory(**overrides) -> Booking:
        data = {
            "id": counter["next_id"],
            "staff_name": "Alice",
            "resource_type": "room",
            "resource": "Boardroom A",
            "date": TODAY,
            "start_time": "09:00",
            "end_time": "10:00",
        }
        data.update(overrides)
        counter["next_id"] = max(counter["next_id"], data["id"]) + 1
        return Booking(**data)

    return factory


@pytest.fixture()
def fixed_today() -> date:
    bookings_app.dependency_overrides[get_today] = lambda: TODAY
    return TODAY


@pytest.fixture()
def bookings_client() -> Generator[TestClient, None, None]:
    with TestClient(bookings_app) as client:
        yield client
