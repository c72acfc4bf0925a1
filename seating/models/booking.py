"""
Booking model with the seating state machine
"""

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
from enum import Enum

from seating.core.clock import utcnow
from seating.core.exceptions import InvalidTransitionError


class BookingStatus(str, Enum):
    """Status of a booking"""
    WAITING = "WAITING"             # In the queue, no table yet
    SEATED = "SEATED"               # Party is at a table
    COMPLETED = "COMPLETED"         # Party checked out
    CANCELLED = "CANCELLED"         # Party left the queue or was removed


TERMINAL_STATUSES = (BookingStatus.COMPLETED, BookingStatus.CANCELLED)


class Booking(SQLModel, table=True):
    """A party's request for a table"""

    __tablename__ = "table_bookings"

    id: Optional[int] = Field(default=None, primary_key=True)

    # Customer
    customer_name: str = Field(max_length=255, description="Name called when the table is ready")
    customer_phone: str = Field(max_length=50, index=True, description="Contact number for paging")

    # Request
    party_size: int = Field(description="Number of guests")
    booking_time: datetime = Field(
        index=True,
        sa_type=DateTime(timezone=True),
        description="Requested (or arrival) time"
    )
    special_requests: Optional[str] = Field(
        default=None,
        max_length=1000,
        nullable=True,
        description="Allergies, high chair, preferred area, etc."
    )

    # Seating
    table_id: Optional[int] = Field(
        default=None,
        foreign_key="restaurant_tables.id",
        index=True,
        nullable=True,
        description="Table the party is seated at (absent until seated)"
    )
    status: BookingStatus = Field(default=BookingStatus.WAITING, index=True)
    estimated_wait_time: Optional[int] = Field(
        default=None,
        description="Estimated wait in minutes, computed at creation"
    )
    actual_seat_time: Optional[datetime] = Field(default=None, nullable=True, sa_type=DateTime(timezone=True))
    checkout_time: Optional[datetime] = Field(default=None, nullable=True, sa_type=DateTime(timezone=True))

    # Optimistic concurrency control
    version: int = Field(
        default=1,
        description="Version number for optimistic concurrency control"
    )

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    # State machine methods
    def is_terminal(self) -> bool:
        """Check if the booking has reached COMPLETED or CANCELLED"""
        return self.status in TERMINAL_STATUSES

    def can_seat(self) -> bool:
        """Check if the party can be seated"""
        return self.status == BookingStatus.WAITING

    def can_complete(self) -> bool:
        """Check if the booking can be checked out"""
        return not self.is_terminal()

    def can_cancel(self) -> bool:
        """Check if the booking can be cancelled"""
        return self.status != BookingStatus.COMPLETED

    def transition_to_seated(self, table_id: int) -> None:
        """Transition booking to SEATED at the given table"""
        if not self.can_seat():
            raise InvalidTransitionError(
                f"Cannot seat booking {self.id}: status is {self.status.value}, expected WAITING"
            )

        now = utcnow()
        self.table_id = table_id
        self.status = BookingStatus.SEATED
        self.actual_seat_time = now
        self.updated_at = now
        self.version += 1

    def transition_to_completed(self) -> None:
        """Transition booking to COMPLETED (party checked out)"""
        if not self.can_complete():
            raise InvalidTransitionError(
                f"Cannot complete booking {self.id}: status is {self.status.value}"
            )

        now = utcnow()
        self.status = BookingStatus.COMPLETED
        self.checkout_time = now
        self.updated_at = now
        self.version += 1

    def transition_to_cancelled(self) -> bool:
        """Transition booking to CANCELLED

        Returns False when the booking was already cancelled and nothing
        changed. The table link is dropped but the table itself is left alone.
        """
        if self.status == BookingStatus.CANCELLED:
            return False
        if not self.can_cancel():
            raise InvalidTransitionError(
                f"Cannot cancel booking {self.id}: status is {self.status.value}"
            )

        self.status = BookingStatus.CANCELLED
        self.table_id = None
        self.actual_seat_time = None
        self.updated_at = utcnow()
        self.version += 1
        return True
