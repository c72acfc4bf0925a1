"""
Test configuration for pytest
"""

import os

# Test environment variables, set before the application settings are cached
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["LOG_JSON"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from datetime import datetime, timezone
from typing import Generator, Optional
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

import seating.models  # noqa: F401
from seating.core.events import event_bus
from seating.core.locking import RowLockRegistry
from seating.models.booking import Booking
from seating.models.table import Table, TableStatus
from seating.services.allocation import AllocationCoordinator
from seating.services.booking_queue import BookingQueue
from seating.services.table_registry import TableRegistry


# In-memory SQLite shared by every connection so the API test client sees test data
test_engine = create_engine(
    "sqlite://",
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a clean database session for each test"""
    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(autouse=True)
def clean_event_bus():
    """Drop subscribers registered by a test"""
    yield
    event_bus.clear_subscribers()


@pytest.fixture
def locks() -> RowLockRegistry:
    return RowLockRegistry()


@pytest.fixture
def registry(db: Session, locks: RowLockRegistry) -> TableRegistry:
    return TableRegistry(db, locks)


@pytest.fixture
def queue(db: Session, locks: RowLockRegistry) -> BookingQueue:
    return BookingQueue(db, locks)


@pytest.fixture
def coordinator(db: Session, locks: RowLockRegistry) -> AllocationCoordinator:
    return AllocationCoordinator(db, locks)


@pytest.fixture
def make_table(registry: TableRegistry):
    """Factory for registered tables"""
    def _make_table(
        table_number: int,
        capacity: int = 4,
        status: TableStatus = TableStatus.AVAILABLE,
        location_description: Optional[str] = None,
    ) -> Table:
        return registry.create(Table(
            table_number=table_number,
            capacity=capacity,
            status=status,
            location_description=location_description,
        ))
    return _make_table


@pytest.fixture
def make_booking(queue: BookingQueue):
    """Factory for waiting bookings"""
    def _make_booking(
        customer_name: str = "Ada Lovelace",
        customer_phone: str = "555-0100",
        party_size: int = 2,
        booking_time: Optional[datetime] = None,
        special_requests: Optional[str] = None,
    ) -> Booking:
        return queue.create(Booking(
            customer_name=customer_name,
            customer_phone=customer_phone,
            party_size=party_size,
            booking_time=booking_time or datetime.now(timezone.utc),
            special_requests=special_requests,
        ))
    return _make_booking
