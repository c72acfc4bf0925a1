"""
Booking queue: pending and active booking requests
"""

from datetime import datetime
from typing import List, Optional, Tuple

from sqlmodel import func, select

from seating.core.clock import as_utc, utcnow
from seating.core.events import BookingCreated
from seating.core.exceptions import ValidationError
from seating.core.locking import BOOKING
from seating.models.booking import Booking, BookingStatus
from seating.services.base import SessionService
from seating.services.table_registry import TableRegistry
from seating.services.wait_time import WaitTimeEstimator


class BookingQueue(SessionService):
    """Stores bookings and answers queue queries"""

    def create(self, booking: Booking) -> Booking:
        """Add a party to the waiting queue

        The status is forced to WAITING and the wait estimate is computed
        from the queue as it stands before this booking joins it.
        """
        if not booking.customer_name or not booking.customer_name.strip():
            raise ValidationError("Customer name is required")
        if not booking.customer_phone or not booking.customer_phone.strip():
            raise ValidationError("Customer phone is required")
        if booking.party_size is None or booking.party_size < 1:
            raise ValidationError("Party size must be at least 1")
        if booking.booking_time is None:
            raise ValidationError("Booking time is required")

        estimator = WaitTimeEstimator(TableRegistry(self.session, self.locks), self)

        booking.id = None
        booking.customer_name = booking.customer_name.strip()
        booking.customer_phone = booking.customer_phone.strip()
        booking.booking_time = as_utc(booking.booking_time)
        booking.status = BookingStatus.WAITING
        booking.table_id = None
        booking.actual_seat_time = None
        booking.checkout_time = None
        booking.version = 1
        booking.created_at = utcnow()
        booking.updated_at = None
        booking.estimated_wait_time = estimator.estimate(booking.party_size)

        self._commit(booking)
        self._record(BookingCreated(
            booking_id=booking.id,
            party_size=booking.party_size,
            estimated_wait_time=booking.estimated_wait_time,
        ))
        return booking

    def get(self, booking_id: int) -> Booking:
        return self._fetch(Booking, BOOKING, booking_id)

    def list_all(self) -> List[Booking]:
        return list(self.session.exec(select(Booking).order_by(Booking.id)).all())

    def list_waiting(self) -> List[Booking]:
        """WAITING bookings, earliest requested time first"""
        return list(self.session.exec(
            select(Booking)
            .where(Booking.status == BookingStatus.WAITING)
            .order_by(Booking.booking_time, Booking.id)
        ).all())

    def list_by_phone(self, customer_phone: str) -> List[Booking]:
        return list(self.session.exec(
            select(Booking)
            .where(Booking.customer_phone == customer_phone.strip())
            .order_by(Booking.booking_time, Booking.id)
        ).all())

    def list_between(self, start: datetime, end: datetime) -> List[Booking]:
        """Bookings requested within [start, end], any status"""
        start, end = as_utc(start), as_utc(end)
        if start > end:
            raise ValidationError("Start of range must not be after its end")
        return list(self.session.exec(
            select(Booking)
            .where(
                Booking.booking_time >= start,
                Booking.booking_time <= end,
            )
            .order_by(Booking.booking_time, Booking.id)
        ).all())

    def count_waiting(self) -> int:
        return self.count_by_status(BookingStatus.WAITING)

    def count_by_status(self, status: BookingStatus) -> int:
        return self.session.exec(
            select(func.count()).select_from(Booking).where(Booking.status == status)
        ).one()

    def current_booking_for_table(self, table_id: int) -> Optional[Booking]:
        """The SEATED booking holding ``table_id``, if any"""
        return self.session.exec(
            select(Booking)
            .where(Booking.table_id == table_id, Booking.status == BookingStatus.SEATED)
            .order_by(Booking.id)
        ).first()

    def seat_time_samples(self, since: datetime) -> List[Tuple[datetime, datetime]]:
        """(booking_time, actual_seat_time) for parties booked since ``since`` who were seated"""
        rows = self.session.exec(
            select(Booking.booking_time, Booking.actual_seat_time).where(
                Booking.status.in_([BookingStatus.SEATED, BookingStatus.COMPLETED]),
                Booking.actual_seat_time.is_not(None),
                Booking.booking_time >= as_utc(since),
            )
        ).all()
        return [(booked, seated) for booked, seated in rows]

    def cancel(self, booking_id: int, expected_version: Optional[int] = None) -> Booking:
        """Cancel a booking; cancelling an already cancelled booking is a no-op"""
        # Late import: the coordinator builds on this queue
        from seating.services.allocation import AllocationCoordinator

        coordinator = AllocationCoordinator(self.session, self.locks)
        booking = coordinator.cancel(booking_id, expected_version=expected_version)
        for event in coordinator.drain_events():
            self._record(event)
        return booking
