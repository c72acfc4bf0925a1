"""
Allocation coordinator: drives bookings and tables through their lifecycles

Every transition runs in one transaction while holding the per-row locks of
the rows it touches, booking before table. Booking transitions:

    WAITING --seat--> SEATED --complete--> COMPLETED
    WAITING --complete--> COMPLETED          (no table side effect)
    WAITING|SEATED --cancel--> CANCELLED     (held table is not released)

Seating does not look at the table's status or capacity. It only refuses a
table that already holds a SEATED booking.
"""

from typing import Optional

from seating.core.events import BookingCancelled, BookingCompleted, BookingSeated
from seating.core.exceptions import TableOccupiedError
from seating.core.locking import BOOKING, TABLE
from seating.models.booking import Booking
from seating.models.table import Table, TableStatus
from seating.services.base import SessionService
from seating.services.booking_queue import BookingQueue


class AllocationCoordinator(SessionService):
    """Seats, completes and cancels bookings"""

    def seat(self, booking_id: int, table_id: int, expected_version: Optional[int] = None) -> Booking:
        """Seat a waiting party at a table and mark the table OCCUPIED"""
        with self.locks.hold((BOOKING, booking_id), (TABLE, table_id)):
            try:
                booking = self._fetch_for_update(Booking, BOOKING, booking_id)
                table = self._fetch_for_update(Table, TABLE, table_id)
                self._check_version(booking, BOOKING, expected_version)

                if booking.can_seat():
                    occupant = BookingQueue(self.session, self.locks).current_booking_for_table(table.id)
                    if occupant is not None:
                        raise TableOccupiedError(table.id, occupant.id)

                booking.transition_to_seated(table.id)
                table.mark(TableStatus.OCCUPIED)
            except Exception:
                self.session.rollback()
                raise
            self._commit(booking, table)

        self._record(BookingSeated(booking_id=booking.id, table_id=table.id))
        return booking

    def complete(self, booking_id: int, expected_version: Optional[int] = None) -> Booking:
        """Check a party out and free its table, if it had one"""
        with self.locks.hold((BOOKING, booking_id)):
            try:
                booking = self._fetch_for_update(Booking, BOOKING, booking_id)
                self._check_version(booking, BOOKING, expected_version)
            except Exception:
                self.session.rollback()
                raise

            if booking.table_id is None:
                try:
                    booking.transition_to_completed()
                except Exception:
                    self.session.rollback()
                    raise
                self._commit(booking)
            else:
                with self.locks.hold((TABLE, booking.table_id)):
                    try:
                        table = self._fetch_for_update(Table, TABLE, booking.table_id)
                        booking.transition_to_completed()
                        table.mark(TableStatus.AVAILABLE)
                    except Exception:
                        self.session.rollback()
                        raise
                    self._commit(booking, table)

        self._record(BookingCompleted(booking_id=booking.id, released_table_id=booking.table_id))
        return booking

    def cancel(self, booking_id: int, expected_version: Optional[int] = None) -> Booking:
        """Cancel a booking without touching any table it held"""
        with self.locks.hold((BOOKING, booking_id)):
            try:
                booking = self._fetch_for_update(Booking, BOOKING, booking_id)
                self._check_version(booking, BOOKING, expected_version)
                previous_status = booking.status
                held_table_id = booking.table_id
                changed = booking.transition_to_cancelled()
            except Exception:
                self.session.rollback()
                raise
            if changed:
                self._commit(booking)
            else:
                # Release the row lock taken by the read
                self.session.rollback()
                self.session.refresh(booking)

        if changed:
            self._record(BookingCancelled(
                booking_id=booking.id,
                previous_status=previous_status.value,
                held_table_id=held_table_id,
            ))
        return booking
